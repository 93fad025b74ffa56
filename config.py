"""
Configuration module for the Approval Latency Reporter
Contains all configurable constants and settings used across the application.
"""

import os
from typing import List, Dict, Any, Optional, Tuple


# ============================================================================
# EVENT MARKERS
# ============================================================================

# Free-text markers identifying workflow events. Order matters: when a cell
# carries both, the first marker listed wins.
APPROVED_MARKER: str = 'Approved in'
REJECTED_MARKER: str = 'Rejected in'

# Cycle labels appear as a prefixed token, e.g. "W12"
CYCLE_LABEL_PREFIX: str = 'W'


# ============================================================================
# CALENDAR RULES
# ============================================================================

# 52.14 weeks per year split into 4 quarters
WEEKS_PER_QUARTER: float = 13.04

# A later approval this many calendar months after the first one is rework
REWORK_THRESHOLD_MONTHS: int = 3

# Week 52 specs approved in January belong to the previous year
LATE_CYCLE_LABEL_CUTOFF: int = 12

# Accepted event/creation date formats (Jira CSV export style first)
EVENT_DATE_FORMATS: Tuple[str, ...] = ('%d/%b/%y', '%d/%b/%Y', '%Y-%m-%d')


# ============================================================================
# BULK TABULAR EXPORT
# ============================================================================

# Semantic field -> zero-based column index in the pre-exported rows
DEFAULT_COLUMN_SCHEMA: Dict[str, int] = {
    'item_key': 1,
    'status': 4,
    'created': 20,
    'business_unit': 604,
    'product': 629,
    'spec_type': 1096,
}

# Only events from this year are reported from bulk exports
DEFAULT_TARGET_YEAR: int = 2022


# ============================================================================
# JIRA INTEGRATION SETTINGS
# ============================================================================

DEFAULT_JIRA_JQL: str = 'issuetype = Spec ORDER BY created ASC'
JIRA_PAGE_SIZE: int = 100
JIRA_REQUEST_TIMEOUT: int = 60

# Semantic field -> Jira issue field id
DEFAULT_JIRA_FIELD_MAP: Dict[str, str] = {
    'spec_type': 'issuetype',
    'status': 'summary',
    'business_unit': 'customfield_10100',
    'product': 'customfield_10101',
    'created': 'created',
}


# ============================================================================
# REPORT FORMATTING
# ============================================================================

REPORT_COLUMNS: List[str] = [
    'Type',
    'Issue',
    'Status',
    'BU',
    'Product',
    'Year',
    'Week',
    'Later Approved Count',
    'Later Approved Weeks',
    'Latency(Days)',
    'Rejected prior to 1st approval',
]

REWORK_REPORT_COLUMNS: List[str] = REPORT_COLUMNS + [
    'Approved First Time',
    'Quarter',
    'Rework Week',
    'Rework Quarter',
    'Rework Year',
    'Rework Later Approvals',
]

# Separator between later approval weeks, e.g. "W14:W30"
LATER_APPROVALS_SEPARATOR: str = ':'


# ============================================================================
# ENVIRONMENT VARIABLE HELPERS
# ============================================================================

def get_jira_base_url() -> str:
    """Get Jira site URL from environment variables."""
    return os.getenv('JIRA_BASE_URL', '')

def get_jira_email() -> str:
    """Get Jira account email from environment variables."""
    return os.getenv('JIRA_EMAIL', '')

def get_jira_api_token() -> str:
    """Get Jira API token from environment variables."""
    return os.getenv('JIRA_API_TOKEN', '')

def get_jira_jql() -> str:
    """Get the issue search query from environment variables with fallback."""
    return os.getenv('JIRA_JQL', DEFAULT_JIRA_JQL)

def get_target_year() -> Optional[int]:
    """Get the reporting year from environment variables, if set and numeric."""
    value = os.getenv('REPORT_TARGET_YEAR', '').strip()
    return int(value) if value.isdigit() else None


# ============================================================================
# CONFIGURATION VALIDATION
# ============================================================================

def validate_configuration() -> Dict[str, Any]:
    """Validate configuration and return status."""
    config_status = {
        'jira_base_url': bool(get_jira_base_url()),
        'jira_email': bool(get_jira_email()),
        'jira_api_token': bool(get_jira_api_token()),
        'jira_jql': get_jira_jql(),
        'issues': []
    }

    # Jira credentials are only needed for the remote source
    if not config_status['jira_base_url']:
        config_status['issues'].append('JIRA_BASE_URL environment variable not set')
    if not config_status['jira_email']:
        config_status['issues'].append('JIRA_EMAIL environment variable not set')
    if not config_status['jira_api_token']:
        config_status['issues'].append('JIRA_API_TOKEN environment variable not set')

    return config_status


__all__ = [
    'APPROVED_MARKER',
    'REJECTED_MARKER',
    'CYCLE_LABEL_PREFIX',
    'WEEKS_PER_QUARTER',
    'REWORK_THRESHOLD_MONTHS',
    'LATE_CYCLE_LABEL_CUTOFF',
    'EVENT_DATE_FORMATS',
    'DEFAULT_COLUMN_SCHEMA',
    'DEFAULT_TARGET_YEAR',
    'DEFAULT_JIRA_JQL',
    'JIRA_PAGE_SIZE',
    'JIRA_REQUEST_TIMEOUT',
    'DEFAULT_JIRA_FIELD_MAP',
    'REPORT_COLUMNS',
    'REWORK_REPORT_COLUMNS',
    'LATER_APPROVALS_SEPARATOR',
    'get_jira_base_url',
    'get_jira_email',
    'get_jira_api_token',
    'get_jira_jql',
    'get_target_year',
    'validate_configuration'
]
