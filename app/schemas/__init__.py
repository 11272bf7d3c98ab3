from .common import DecisionRequest
from .user import User, UserCreate, UserUpdate, Role
from .resource import Resource, ResourceCreate, ResourceUpdate, ResourceStats, CategoryCount
from .approval import Approval, ApprovalCreate, ApprovalUpdate
from .formula import Formula, FormulaCreate, FormulaUpdate, Component, ComponentCreate, ComponentUpdate
from .quote import Quote, QuoteCreate, QuoteUpdate, QuoteTemplate, QuoteTemplateCreate
from .auth import Principal
