from cowatch.models.user import User
from cowatch.models.video import Video

__all__ = ["User", "Video"]
