from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from efrsb.search.models import CaseRecord, ErrorKind, ItemOutcome, SearchKind, SearchQuery

_KINDS: dict[str, SearchKind] = {
    "debtor": SearchKind.DEBTOR,
    "caseNumber": SearchKind.CASE_NUMBER,
    "inn": SearchKind.INN,
}


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SearchRequest(_CamelModel):
    type: Literal["debtor", "caseNumber", "inn"]
    query: str = ""
    region: str | None = None

    def to_query(self, default_region: str) -> SearchQuery:
        return SearchQuery(
            kind=_KINDS[self.type],
            text=self.query,
            region=self.region or default_region,
        )


class CasePayload(_CamelModel):
    case_number: str = ""
    debtor_name: str = ""
    status: str = ""
    court: str = ""
    inn: str | None = None
    ogrn: str | None = None
    judge: str | None = None
    manager: str | None = None
    open_date: str | None = None
    debt_amount: str | None = None
    region: str | None = None
    address: str | None = None
    category: str | None = None
    last_update: str | None = None
    publication_date: str | None = None

    def to_domain(self) -> CaseRecord:
        return CaseRecord(**self.model_dump())


class OutcomePayload(_CamelModel):
    inn: str
    is_bankrupt: bool = False
    cases: list[CasePayload] = Field(default_factory=list)
    error: str | None = None
    error_kind: ErrorKind | None = None

    def to_domain(self) -> ItemOutcome:
        return ItemOutcome(
            identifier=self.inn,
            is_confirmed=self.is_bankrupt,
            records=tuple(c.to_domain() for c in self.cases),
            error=self.error,
            error_kind=self.error_kind,
        )


class ExportRequest(_CamelModel):
    """Either batch ``results`` or single-search ``cases`` to export."""

    results: list[OutcomePayload] | None = None
    cases: list[CasePayload] | None = None
