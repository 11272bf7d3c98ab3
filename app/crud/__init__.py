from .crud_approval import approval
from .crud_formula import formula
from .crud_quote import quote
from .crud_resource import resource
from .user import user
