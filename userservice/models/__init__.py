from userservice.models.user import User
from userservice.models.friendship import Friendship
from userservice.models.enemy import Enmity

__all__ = ["User", "Friendship", "Enmity"]
