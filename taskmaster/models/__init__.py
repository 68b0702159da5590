from .user import User
from .team import Team
from .team_member import TeamMember
from .team_invitation import TeamInvitation
from .task import Task
from .comment import Comment
from .attachment import Attachment
from .notification import Notification

# додай тут всі свої моделі!
