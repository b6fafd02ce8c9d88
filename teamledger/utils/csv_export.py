"""CSV rendering for report views."""

from typing import Iterable, Type

import pandas as pd
from pydantic import BaseModel


def rows_to_csv(rows: Iterable[BaseModel], model: Type[BaseModel]) -> str:
    """
    One header row of field names, then one row per record.

    Columns come from the model so an empty report still has its header.
    Free-text cells containing commas, quotes or newlines are quoted.
    """
    columns = list(model.model_fields.keys())
    df = pd.DataFrame([row.model_dump(mode="json") for row in rows], columns=columns)
    return df.to_csv(index=False)
