"""
Built-in planner tools.
"""

from ragengine.core.agentic_system.planner.tools.csv_export_tool import CsvExportTool
from ragengine.core.agentic_system.planner.tools.document_search_tool import DocumentSearchTool
from ragengine.core.agentic_system.planner.tools.read_only_query_tool import ReadOnlyQueryTool

__all__ = ["CsvExportTool", "DocumentSearchTool", "ReadOnlyQueryTool"]
