from flask import current_app

from src.extensions import backend, snapshots
from settings.company_settings import BillingContext, CompanySettings


class SettingsService:
    @staticmethod
    def get_company_settings(credentials):
        """Tenant settings, fetched once per snapshot lifetime."""
        default_currency = current_app.config.get("DEFAULT_CURRENCY", "INR")

        def load():
            data = backend.get("/settings", credentials, fallback_message="Failed to load company settings")
            return CompanySettings.from_api(data, default_currency)

        return snapshots.get_or_load("settings", credentials.tenant_key, load)

    @staticmethod
    def billing_context(credentials):
        settings = SettingsService.get_company_settings(credentials)
        return BillingContext.from_config(current_app.config, settings)
