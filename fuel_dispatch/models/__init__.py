# Alembic will detect models here
from .truck import Truck
from .customer import Customer
from .user import User
from .assignment import Assignment
from .client_allocation import ClientAllocation
