class Customer:
    """Customer record as served by the backend ``/customers`` resource."""

    def __init__(self, id, name="", business_name="", phone="", email="", gst_number="", address=None):
        self.id = id
        self.name = name
        self.business_name = business_name
        self.phone = phone
        self.email = email
        self.gst_number = gst_number
        self.address = address or {}

    @classmethod
    def from_api(cls, data):
        return cls(
            id=str(data.get("_id") or data.get("id") or ""),
            name=data.get("name") or "",
            business_name=data.get("businessName") or "",
            phone=data.get("phone") or "",
            email=data.get("email") or "",
            gst_number=data.get("gstNumber") or "",
            address=data.get("address") or {},
        )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "businessName": self.business_name,
            "phone": self.phone,
            "email": self.email,
            "gstNumber": self.gst_number,
            "address": self.address,
        }
