from .user_model import User
from .unit_model import Unit
from .lease_model import Lease
from .rental_request_model import RentalRequest

__all__ = ["User", "Unit", "Lease", "RentalRequest"]
