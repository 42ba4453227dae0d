from typing import Optional

from models import UserProfile
from repositories.base import BaseRepository


class UserProfileRepository(BaseRepository):
    model = UserProfile
    resource = "Profile"

    def find_by_user(self, user_id: int) -> Optional[UserProfile]:
        return self._query().filter(UserProfile.user_id == user_id).one_or_none()

    def upsert(
        self,
        user_id: int,
        weight_kg: Optional[float] = None,
        age: Optional[int] = None,
        sex: Optional[str] = None,
    ) -> UserProfile:
        profile = self.find_by_user(user_id)
        if profile is None:
            return self.add(UserProfile(user_id=user_id, weight_kg=weight_kg, age=age, sex=sex))
        profile.weight_kg = weight_kg
        profile.age = age
        profile.sex = sex
        return self.save(profile)
