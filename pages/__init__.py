from __future__ import annotations

from .crud_page import page_crud, crud_section
from .employees_page import page_employees, employees_body
from .dashboard_page import page_dashboard, dashboard_body
from .travel_page import page_travel, travel_body
from .documents_page import page_documents, documents_body

__all__ = [
    "page_crud", "crud_section", "page_employees", "employees_body", "page_dashboard", "dashboard_body",
    "page_travel", "travel_body", "page_documents", "documents_body",
]
