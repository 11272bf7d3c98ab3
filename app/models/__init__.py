from .user import Role, User
from .formula import Formula, FormulaComponent
from .quote import Quote, QuoteTemplate
from .resource import Resource
from .approval import Approval
from .chat import ChatSession, ChatInteraction, ChatAttachment
from .log import ApiLog, UserSession, ActivityLog, Setting
