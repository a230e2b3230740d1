def register_routes(app):
    from customers.customer_routes import bp as customer_bp
    app.register_blueprint(customer_bp, url_prefix="/customers")

    from products.product_routes import bp as product_bp
    app.register_blueprint(product_bp, url_prefix="/products")

    from invoices.invoice_routes import bp as invoice_bp
    app.register_blueprint(invoice_bp, url_prefix="/invoices")

    from invoices.draft_routes import bp as draft_bp
    app.register_blueprint(draft_bp, url_prefix="/drafts")

    from settings.settings_routes import bp as settings_bp
    app.register_blueprint(settings_bp, url_prefix="/settings")

    from superadmin.superadmin_routes import bp as superadmin_bp
    app.register_blueprint(superadmin_bp, url_prefix="/super-admin")

    from activity.activity_routes import bp as activity_bp
    app.register_blueprint(activity_bp, url_prefix="/activity-logs")
