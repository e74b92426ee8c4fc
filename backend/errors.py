class CatalogError(Exception):
    """
    Base class for every failure raised by the pricing and discount services.

    Subclasses carry the identifying fields a caller needs to report the
    failure without parsing the message text.
    """
    status_code = 500

    def to_dict(self):
        return {"error": str(self)}


class UnsupportedCountry(CatalogError):
    status_code = 400

    def __init__(self, country, supported=()):
        self.country = country
        self.supported = list(supported)
        super().__init__(f"Unsupported country: {country}")

    def to_dict(self):
        return {
            "error": str(self),
            "country": self.country,
            "supportedCountries": self.supported,
        }


class ProductNotFound(CatalogError):
    status_code = 404

    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(f"Product with ID '{product_id}' not found")

    def to_dict(self):
        return {"error": str(self), "productId": self.product_id}


class ProductAlreadyExists(CatalogError):
    status_code = 409

    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(f"Product with ID '{product_id}' already exists")

    def to_dict(self):
        return {"error": str(self), "productId": self.product_id}


class InvalidDiscount(CatalogError):
    status_code = 400

    def __init__(self, reason, discount_id=None):
        self.reason = reason
        self.discount_id = discount_id
        super().__init__(f"Invalid discount: {reason}")

    def to_dict(self):
        payload = {"error": str(self)}
        if self.discount_id:
            payload["discountId"] = self.discount_id
        return payload


class InvalidProduct(CatalogError):
    status_code = 400

    def __init__(self, reason):
        self.reason = reason
        super().__init__(f"Invalid product: {reason}")


class StorageFault(CatalogError):
    """
    Raised when the database fails for a reason other than a duplicate
    discount. The driver error is chained as __cause__ and never exposed
    through the message.
    """
    status_code = 500

    def __init__(self, operation):
        self.operation = operation
        super().__init__(f"Database error while {operation}")
