"""Top‑level package for the House Expenses dashboard.

The primary modules are:

* ``models`` – categories, subcategories, expenses and periods
* ``mandatory`` – expected amounts, payment matching and the pending payments feed
* ``budget_limit`` – monthly/annual budget limit evaluation
* ``rollover`` – month rollover detection for unpaid fixed expenses
* ``spending`` – spending totals, chart series and category breakdowns
* ``dashboard`` – a Streamlit app that ties everything together

To run the dashboard from the command line you can execute:

```bash
streamlit run house_expenses/dashboard.py
```
"""

from . import models  # noqa: F401  # re-exported for convenience
from . import mandatory  # noqa: F401  # re-exported for convenience
from . import budget_limit  # noqa: F401  # re-exported for convenience
from . import rollover  # noqa: F401  # re-exported for convenience
from . import spending  # noqa: F401  # re-exported for convenience
# Import dashboard lazily.  Streamlit may not be installed in all
# environments (e.g. during unit testing).
try:
    from . import dashboard  # type: ignore  # noqa: F401
except ModuleNotFoundError:
    dashboard = None  # type: ignore


__all__ = ["models", "mandatory", "budget_limit", "rollover", "spending", "dashboard"]
