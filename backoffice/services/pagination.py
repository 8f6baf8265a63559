# backoffice/services/pagination.py
"""
Translate listing parameters (page, size, direction, sort field) into
store queries and wrap the results in a Page envelope.

Sort fields are addressed by their API name and must be allow-listed
per listing; anything else is rejected before a query is built.
"""
import enum
import math
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

from backoffice.core.errors import InvalidArgumentError
from backoffice.schemas.common import Page, PageMeta

R = TypeVar("R")
T = TypeVar("T")


class SortDirection(str, enum.Enum):
    ASC = "ASC"
    DESC = "DESC"


@dataclass(frozen=True)
class PageRequest:
    page: int
    size: int
    direction: SortDirection
    sort_by: str
    sort_column: Any
    tie_breaker: Any = None

    @property
    def offset(self) -> int:
        return self.page * self.size

    def apply(self, stmt):
        """Add ORDER BY / OFFSET / LIMIT to a select statement."""
        if self.direction is SortDirection.ASC:
            clauses = [self.sort_column.asc()]
        else:
            clauses = [self.sort_column.desc()]
        # Rows with equal sort keys keep a stable order across pages.
        if self.tie_breaker is not None:
            clauses.append(self.tie_breaker.asc())
        return stmt.order_by(*clauses).offset(self.offset).limit(self.size)


class PaginationGateway:
    """
    Builds validated PageRequests for one listing.

    Args:
        sort_fields: API field name -> model column, in display order.
        tie_breaker: column appended to every ORDER BY.
        max_size: upper bound for the page size (None = unbounded).
    """

    def __init__(
        self,
        sort_fields: dict[str, Any],
        tie_breaker: Any = None,
        max_size: int | None = None,
    ):
        self.sort_fields = sort_fields
        self.tie_breaker = tie_breaker
        self.max_size = max_size

    def page_request(
        self,
        page: int,
        size: int,
        direction: str,
        sort_by: str,
    ) -> PageRequest:
        if page < 0:
            raise InvalidArgumentError(
                "Invalid parameter: Page numeration starts from 0"
            )
        if size < 1:
            raise InvalidArgumentError(
                "Invalid parameter: Size must be greater than or equal to 1"
            )
        if self.max_size is not None and size > self.max_size:
            raise InvalidArgumentError(
                f"Invalid parameter: Size must be less than or equal to {self.max_size}"
            )

        try:
            sort_direction = SortDirection(str(direction).upper())
        except ValueError:
            raise InvalidArgumentError(
                "Invalid order: Must be 'ASC' or 'DESC' ('asc' or 'desc')"
            )

        column = self.sort_fields.get(sort_by)
        if column is None:
            allowed = ", ".join(f"'{name}'" for name in self.sort_fields)
            raise InvalidArgumentError(
                f"Invalid value: Must be one of the following: {allowed}"
            )

        return PageRequest(
            page=page,
            size=size,
            direction=sort_direction,
            sort_by=sort_by,
            sort_column=column,
            tie_breaker=self.tie_breaker,
        )

    @staticmethod
    def to_page(
        rows: list[R],
        total: int,
        page_request: PageRequest,
        mapper: Callable[[R], T],
    ) -> Page[T]:
        return Page(
            content=[mapper(row) for row in rows],
            page=PageMeta(
                size=page_request.size,
                number=page_request.page,
                total_elements=total,
                total_pages=math.ceil(total / page_request.size),
            ),
        )
