from app.models.invoice import Invoice
from app.models.lease import Lease
from app.models.property import Property
from app.models.regularisation import ChargeRegularisation

__all__ = ["Property", "Lease", "Invoice", "ChargeRegularisation"]
