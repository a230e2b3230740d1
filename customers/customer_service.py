import re

from backend.exceptions import ApiError
from customers.customer import Customer
from src.extensions import backend

CUSTOMER_FETCH_LIMIT = 1000
MIN_PHONE_DIGITS = 10


def is_phone_query(query):
    """Digits-only queries of 5+ characters search by phone, anything else by business name."""
    query = (query or "").strip()
    return query.isdigit() and len(query) >= 5


class CustomerService:
    @staticmethod
    def list_customers(credentials):
        page = backend.get_page("/customers", credentials, params={"limit": CUSTOMER_FETCH_LIMIT},
                                key="customers", fallback_message="Error fetching customers")
        return [Customer.from_api(item) for item in page.items]

    @staticmethod
    def search(credentials, query):
        """Single best match from the backend, or None when nothing matches."""
        query = (query or "").strip()
        if not query:
            raise ValueError("Please enter Mobile Number or Business Name.")
        params = {"phone": query} if is_phone_query(query) else {"businessName": query}
        try:
            data = backend.get("/customers/search", credentials, params=params,
                               fallback_message="Error searching for customer")
        except ApiError as e:
            if e.status_code == 404:
                return None
            raise
        if not data:
            return None
        if isinstance(data, list):
            return Customer.from_api(data[0]) if data else None
        return Customer.from_api(data)

    @staticmethod
    def create_customer(credentials, data):
        data = dict(data or {})
        if not (data.get("name") or "").strip():
            raise ValueError("Please enter Contact Name.")
        digits = re.sub(r"\D", "", data.get("phone") or "")
        if len(digits) < MIN_PHONE_DIGITS:
            raise ValueError(f"Please enter a valid Phone Number (min {MIN_PHONE_DIGITS} digits).")
        created = backend.post("/customers", credentials, json=data, fallback_message="Error creating customer")
        return Customer.from_api(created)
