#!/usr/bin/env python3
"""
Jira event source

Pages through an issue search, then through each issue's comments, and yields
a RawRecord for every comment carrying an approval or rejection note.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

import requests

from config import (
    DEFAULT_JIRA_FIELD_MAP,
    DEFAULT_JIRA_JQL,
    JIRA_PAGE_SIZE,
    JIRA_REQUEST_TIMEOUT,
    get_jira_base_url,
    get_jira_email,
    get_jira_api_token,
    get_jira_jql,
    get_target_year,
)
from event_source import EventSource, EventSourceError
from models import RawRecord
from status_display import StatusDisplay
from utils_dates import try_parse_event_date
from utils_markers import adf_to_text, extract_cycle_label, find_marker


@dataclass
class JiraConfig:
    """Connection and query settings for a Jira Cloud site"""
    base_url: str
    email: str
    api_token: str
    jql: str = DEFAULT_JIRA_JQL
    page_size: int = JIRA_PAGE_SIZE
    timeout: int = JIRA_REQUEST_TIMEOUT
    field_map: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_JIRA_FIELD_MAP))
    target_year: Optional[int] = None
    limit: Optional[int] = None

    @classmethod
    def from_env(cls, **overrides) -> 'JiraConfig':
        """Build a config from JIRA_* environment variables (load .env first)"""
        values = {
            'base_url': get_jira_base_url(),
            'email': get_jira_email(),
            'api_token': get_jira_api_token(),
            'jql': get_jira_jql(),
            'target_year': get_target_year(),
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)

    def missing_settings(self) -> List[str]:
        missing = []
        if not self.base_url:
            missing.append('JIRA_BASE_URL')
        if not self.email:
            missing.append('JIRA_EMAIL')
        if not self.api_token:
            missing.append('JIRA_API_TOKEN')
        return missing


def field_value(value: Any) -> str:
    """Render a Jira field value (option, user, issue type, list or scalar) as text"""
    if value is None:
        return ''
    if isinstance(value, dict):
        for key in ('name', 'value', 'displayName', 'key'):
            if value.get(key):
                return str(value[key])
        return ''
    if isinstance(value, list):
        return ', '.join(text for text in (field_value(item) for item in value) if text)
    return str(value)


class JiraEventSource(EventSource):
    """Fetch approval notes from Jira issue comments"""

    def __init__(self, config: JiraConfig, status: Optional[StatusDisplay] = None):
        self.config = config
        self.base_url = config.base_url.rstrip('/')
        self.session = requests.Session()
        self.session.auth = (config.email, config.api_token)
        self.session.headers.update({'Accept': 'application/json'})
        self.status = status or StatusDisplay()

    @property
    def description(self) -> str:
        return f"{self.base_url} ({self.config.jql})"

    def _make_request(self, path: str, params: Dict = None) -> Dict:
        """GET a Jira REST resource; any transport or HTTP failure is fatal"""
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, params=params or {}, timeout=self.config.timeout)
        except requests.RequestException as e:
            raise EventSourceError(f"GET {url} failed: {e}") from e

        if response.status_code >= 400:
            raise EventSourceError(f"GET {url} failed {response.status_code}: {response.text[:500]}")

        try:
            return response.json()
        except ValueError as e:
            raise EventSourceError(f"GET {url} returned invalid JSON") from e

    def search_issues(self) -> List[Dict]:
        """Fetch all issues matching the configured JQL using token pagination"""
        issues: List[Dict] = []
        next_page_token = None
        fields = ','.join(sorted(set(self.config.field_map.values())))
        limit = self.config.limit

        while True:
            page_size = self.config.page_size
            if limit:
                page_size = min(page_size, limit - len(issues))

            params = {
                'jql': self.config.jql,
                'maxResults': page_size,
                'fields': fields,
            }
            if next_page_token:
                params['nextPageToken'] = next_page_token

            data = self._make_request('/rest/api/3/search/jql', params)
            batch = data.get('issues', [])
            issues.extend(batch)
            self.status.update(f"📥 Fetched {len(issues)} issues...")

            if limit and len(issues) >= limit:
                issues = issues[:limit]
                break
            next_page_token = data.get('nextPageToken')
            if not next_page_token or not batch or data.get('isLast'):
                break

        return issues

    def fetch_comments(self, issue_key: str) -> List[Dict]:
        """Fetch every comment on an issue using offset pagination"""
        comments: List[Dict] = []
        start_at = 0

        while True:
            params = {
                'startAt': start_at,
                'maxResults': self.config.page_size,
                'orderBy': 'created',
            }
            data = self._make_request(f"/rest/api/3/issue/{issue_key}/comment", params)
            batch = data.get('comments', [])
            comments.extend(batch)

            start_at += len(batch)
            if not batch or start_at >= data.get('total', 0):
                break

        return comments

    def _issue_metadata(self, issue: Dict) -> Dict[str, str]:
        fields = issue.get('fields') or {}
        return {name: field_value(fields.get(field_id)) for name, field_id in self.config.field_map.items()}

    def records_from_issue(self, issue: Dict, comments: List[Dict]) -> Iterable[RawRecord]:
        """Yield a raw record for each marked comment on one issue"""
        issue_key = issue.get('key', '')
        metadata = self._issue_metadata(issue)

        for comment in comments:
            text = adf_to_text(comment.get('body'))
            if find_marker(text) is None:
                continue

            event_date_text = comment.get('created', '')
            if self.config.target_year:
                event_date = try_parse_event_date(event_date_text)
                if event_date and event_date.year != self.config.target_year:
                    continue

            yield RawRecord(
                item_key=issue_key,
                free_text=text,
                event_date_text=event_date_text,
                cycle_label_text=extract_cycle_label(text),
                metadata_fields=metadata,
            )

    def fetch_all_raw_records(self) -> Iterable[RawRecord]:
        self.status.start(f"🔍 Searching {self.base_url} for issues...")
        try:
            issues = self.search_issues()
            records: List[RawRecord] = []
            for i, issue in enumerate(issues, start=1):
                issue_key = issue.get('key', '')
                self.status.update(f"💬 Reading comments {i}/{len(issues)} - {issue_key}")
                comments = self.fetch_comments(issue_key)
                records.extend(self.records_from_issue(issue, comments))
        finally:
            self.status.stop()

        self.status.print(f"✅ Fetched {len(issues)} issues, {len(records)} approval/rejection notes", style="green")
        return records
