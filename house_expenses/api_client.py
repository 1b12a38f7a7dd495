"""HTTP client for the house expenses backend.

Every backend response is wrapped in an envelope::

    {"success": true, "data": ..., "message": ..., "error": {...}, "pagination": {...}}

The client unwraps it and returns domain records, raising
:class:`ApiError` for transport failures, HTTP errors and
``success: false`` responses.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

import requests

from . import config
from .models import BudgetLimits, Category, Expense, parse_categories, parse_expenses

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Raised when a backend call fails."""

    def __init__(self, code: str, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status = status


class HouseExpensesClient:
    """Thin wrapper around the REST endpoints the dashboard needs."""

    def __init__(
        self,
        base_url: str = config.API_BASE_URL,
        token: Optional[str] = config.API_TOKEN,
        timeout: float = config.API_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({'Content-Type': 'application/json'})
        if token:
            self.session.headers['Authorization'] = f"Bearer {token}"

    def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.Timeout as exc:
            logger.error("Timed out calling %s %s", method, url)
            raise ApiError('TIMEOUT', f"Request to {path} timed out") from exc
        except requests.exceptions.RequestException as exc:
            logger.error("Error calling %s %s: %s", method, url, exc)
            raise ApiError('NETWORK_ERROR', str(exc)) from exc

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {'success': response.ok, 'data': body}

        if not response.ok or not body.get('success', False):
            error = body.get('error') or {}
            code = error.get('code') or f"HTTP_{response.status_code}"
            message = error.get('message') or body.get('message') or response.reason or 'Request failed'
            logger.error("API error on %s %s (status %s): %s", method, path, response.status_code, message)
            raise ApiError(code, message, status=response.status_code)
        return body

    def get_categories(self, expense_type: Optional[str] = None) -> List[Category]:
        params = {'type': expense_type} if expense_type else {}
        body = self._request('GET', '/v1/categories', params=params)
        return parse_categories(body.get('data') or [])

    def get_expenses(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        page: int = 0,
        size: int = config.DEFAULT_PAGE_SIZE,
        sort: str = 'expenseDate,desc',
    ) -> Tuple[List[Expense], Dict[str, Any]]:
        """Fetch one page of expenses.

        Returns:
            Tuple of (expenses, pagination info)
        """
        params: Dict[str, Any] = {k: v for k, v in (filters or {}).items() if v is not None}
        params.update({'page': page, 'size': size, 'sort': sort})
        body = self._request('GET', '/v1/expenses', params=params)
        return parse_expenses(body.get('data') or []), body.get('pagination') or {}

    def get_all_expenses(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        size: int = 100,
    ) -> List[Expense]:
        """Fetch every page of expenses matching ``filters``."""
        expenses: List[Expense] = []
        page = 0
        while True:
            batch, pagination = self.get_expenses(filters, page=page, size=size)
            expenses.extend(batch)
            if not pagination.get('hasNext') or not batch:
                return expenses
            page += 1

    def get_profile(self) -> BudgetLimits:
        body = self._request('GET', '/v1/auth/profile')
        return BudgetLimits.from_record(body.get('data'))

    def create_expense(self, payload: Mapping[str, Any]) -> Optional[Expense]:
        body = self._request('POST', '/v1/expenses', json=dict(payload))
        records = parse_expenses([body['data']]) if body.get('data') else []
        return records[0] if records else None
