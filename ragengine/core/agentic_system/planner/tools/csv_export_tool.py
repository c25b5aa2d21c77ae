"""
CSV export tool.

Renders tabular data (typically a read-only query result) as CSV text.
"""

import csv
import io
from typing import Any

from pydantic import BaseModel, Field, model_validator

from ragengine.core.agentic_system.planner.tool_registry import AgentTool, CapabilityClass, ToolContext


class CsvExportInput(BaseModel):
    columns: list[str] = Field(min_length=1, description="Header row")
    rows: list[list[Any]] = Field(default_factory=list, description="Data rows, one value per column")

    @model_validator(mode="after")
    def check_row_widths(self) -> "CsvExportInput":
        width = len(self.columns)
        for position, row in enumerate(self.rows):
            if len(row) != width:
                raise ValueError(f"row {position} has {len(row)} values, expected {width}")
        return self


class CsvExportOutput(BaseModel):
    csv: str
    row_count: int


class CsvExportTool(AgentTool):
    name = "csv_export"
    description = "Convert columns and rows into CSV text."
    capability = CapabilityClass.TRANSFORM
    InputModel = CsvExportInput
    OutputModel = CsvExportOutput

    async def run(self, data: CsvExportInput, context: ToolContext) -> CsvExportOutput:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(data.columns)
        writer.writerows(["" if value is None else value for value in row] for row in data.rows)
        return CsvExportOutput(csv=buffer.getvalue(), row_count=len(data.rows))
