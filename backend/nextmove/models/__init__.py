# Import all models so Base.metadata is populated for create_all.
from nextmove.models.company import Company, CompanySettings  # noqa: F401
from nextmove.models.user import User  # noqa: F401
from nextmove.models.session import Session  # noqa: F401
from nextmove.models.audit import AuditLogEvent  # noqa: F401
from nextmove.models.checklist import CustomerChecklist  # noqa: F401
from nextmove.models.tutorial import Tutorial, TutorialProgress  # noqa: F401
from nextmove.models.metric import Metric  # noqa: F401
from nextmove.models.referral import Referral  # noqa: F401
from nextmove.models.callback import Callback  # noqa: F401
