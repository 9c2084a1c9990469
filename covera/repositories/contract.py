"""Contract repository — ``contract:{org_id}:{contract_id}``."""


from covera.repositories.base import RecordRepository
from covera.schemas.contract import Contract


class ContractRepository(RecordRepository[Contract]):
    namespace = "contract"
    model = Contract
