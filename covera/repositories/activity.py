"""Activity and notification repositories.

Activities are keyed under their vendor
(``activity:{org_id}:{vendor_id}:{activity_id}``) so a vendor's history can
be listed or dropped with one prefix scan.
"""


from covera.repositories.base import RecordRepository
from covera.schemas.activity import Activity, Notification


class ActivityRepository(RecordRepository[Activity]):
    namespace = "activity"
    model = Activity

    def _key_for(self, record: Activity) -> str:
        return f"{self._prefix}{record.vendor_id}:{record.id}"

    async def list_for_vendor(self, vendor_id: str) -> list[Activity]:
        return await self.list(f"{vendor_id}:")

    async def delete_for_vendor(self, vendor_id: str) -> int:
        return await self.delete_prefix(f"{vendor_id}:")


class NotificationRepository(RecordRepository[Notification]):
    namespace = "notification"
    model = Notification
