"""Net-worth snapshot model."""

import datetime
from decimal import Decimal

from pydantic import BaseModel


class NetWorthSnapshot(BaseModel):
    """Total assets and liabilities on a given day."""

    date: datetime.date
    assets: Decimal
    liabilities: Decimal
    net_worth: Decimal
