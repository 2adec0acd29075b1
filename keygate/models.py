# Central models file - import every table model here so that
# SQLModel.metadata knows about all of them before create_all runs

from keygate.auth.models import Account, AuthSession, User  # noqa: F401
from keygate.integrations.models import Integration  # noqa: F401
from keygate.workflows.models import Workflow, WorkflowExecution  # noqa: F401
