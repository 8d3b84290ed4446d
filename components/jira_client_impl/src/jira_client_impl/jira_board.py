"""Board, sprint and epic endpoints.

Three sub-APIs live here:

  /rest/agile/1.0                        boards, sprints, epics, backlog, ranking
  /rest/greenhopper/{greenhopper_version} legacy rapid views and sprint reports
  /rest/dev-status/latest/issue          development information (commits, branches, PRs)
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from jira_client_impl.jira_request import JiraRequestCore
from tracker_client_interface.request import HttpMethod


class AgileEndpoints(JiraRequestCore):
    """Jira Software endpoints."""

    # ------------------------------------------------------------------
    # Rapid views (greenhopper)
    # ------------------------------------------------------------------

    def find_rapid_view(self, project_name: str | None = None) -> Any:
        """Find a rapid view by name.

        Returns:
            Every rapid view when ``project_name`` is None, otherwise the first
            view whose name matches case-insensitively, or None.
        """
        response = self.do_request(self.make_request_header(self.make_sprint_query_uri("/rapidviews/list")))
        if project_name is None:
            return response["views"]
        wanted = project_name.lower()
        return next((view for view in response["views"] if view["name"].lower() == wanted), None)

    def get_last_sprint_for_rapid_view(self, rapid_view_id: str) -> Any:
        """Return the last sprint of a rapid view, or None when it has none."""
        response = self.do_request(self.make_request_header(
            self.make_sprint_query_uri(f"/sprintquery/{rapid_view_id}"),
        ))
        sprints = response["sprints"]
        return sprints.pop() if sprints else None

    def list_sprints(self, rapid_view_id: str) -> Any:
        return self.do_request(self.make_request_header(self.make_sprint_query_uri(f"/sprintquery/{rapid_view_id}")))

    def get_sprint_issues(self, rapid_view_id: str, sprint_id: str) -> Any:
        """Return the sprint report: completed, incomplete and punted issues."""
        return self.do_request(self.make_request_header(self.make_sprint_query_uri(
            "/rapid/charts/sprintreport",
            query={"rapidViewId": rapid_view_id, "sprintId": sprint_id},
        )))

    def get_backlog_for_rapid_view(self, rapid_view_id: str) -> Any:
        #served under the core API prefix, not greenhopper
        return self.do_request(self.make_request_header(self.make_uri(
            "/xboard/plan/backlog/data",
            query={"rapidViewId": rapid_view_id},
        )))

    # ------------------------------------------------------------------
    # Development status
    # ------------------------------------------------------------------

    def get_dev_status_summary(self, issue_id: str) -> Any:
        return self.do_request(self.make_request_header(self.make_dev_status_uri(
            "/summary",
            query={"issueId": issue_id},
        )))

    def get_dev_status_detail(self, issue_id: str, application_type: str, data_type: str) -> Any:
        """
        Args:
            issue_id:         Numeric issue id (not the key)
            application_type: e.g. 'github', 'stash', 'bitbucket'
            data_type:        'repository', 'pullrequest' or 'branch'
        """
        return self.do_request(self.make_request_header(self.make_dev_status_uri(
            "/detail",
            query={
                "issueId": issue_id,
                "applicationType": application_type,
                "dataType": data_type,
            },
        )))

    # ------------------------------------------------------------------
    # Issues (agile view)
    # ------------------------------------------------------------------

    def get_issue(self, issue_id_or_key: str, fields: str | None = None, expand: str | None = None) -> Any:
        """Fetch an issue with its agile fields (sprint, epic, flagged, ...)."""
        return self.do_request(self.make_request_header(self.make_agile_uri(
            f"/issue/{issue_id_or_key}",
            query={"fields": fields, "expand": expand},
        )))

    def move_to_backlog(self, issues: list[str]) -> Any:
        return self.do_request(self.make_request_header(self.make_agile_uri("/backlog/issue"), {
            "method": HttpMethod.POST,
            "body": {"issues": issues},
        }))

    def rank_issues(self, body: Mapping[str, Any]) -> Any:
        """Rank issues before or after another issue, e.g. {"issues": [...], "rankBeforeIssue": "PROJ-1"}."""
        return self.do_request(self.make_request_header(self.make_agile_uri("/issue/rank"), {
            "method": HttpMethod.PUT,
            "body": body,
        }))

    def get_issue_estimation_for_board(self, issue_id_or_key: str, board_id: str) -> Any:
        return self.do_request(self.make_request_header(self.make_agile_uri(
            f"/issue/{issue_id_or_key}/estimation",
            query={"boardId": board_id},
        )))

    def estimate_issue_for_board(self, issue_id_or_key: str, board_id: str, body: Mapping[str, Any]) -> Any:
        """Set the estimation an issue has on a board, e.g. {"value": "8"}."""
        return self.do_request(self.make_request_header(
            self.make_agile_uri(f"/issue/{issue_id_or_key}/estimation", query={"boardId": board_id}),
            {
                "method": HttpMethod.PUT,
                "body": body,
            },
        ))

    # ------------------------------------------------------------------
    # Boards
    # ------------------------------------------------------------------

    def get_all_boards(
        self,
        start_at: int = 0,
        max_results: int = 50,
        type: str | None = None,
        name: str | None = None,
        project_key_or_id: str | None = None,
    ) -> Any:
        """
        Args:
            start_at:          Index of the first board to return
            max_results:       Page size
            type:              'scrum' or 'kanban'
            name:              Only boards whose name contains this text
            project_key_or_id: Only boards of this project
        """
        query: dict[str, Any] = {
            "startAt": start_at,
            "maxResults": max_results,
            "type": type,
            "name": name,
        }
        if project_key_or_id:
            query["projectKeyOrId"] = project_key_or_id
        return self.do_request(self.make_request_header(self.make_agile_uri("/board", query=query)))

    def create_board(self, board_body: Mapping[str, Any]) -> Any:
        return self.do_request(self.make_request_header(self.make_agile_uri("/board"), {
            "method": HttpMethod.POST,
            "body": board_body,
        }))

    def get_board(self, board_id: str) -> Any:
        return self.do_request(self.make_request_header(self.make_agile_uri(f"/board/{board_id}")))

    def delete_board(self, board_id: str) -> Any:
        return self.do_request(self.make_request_header(self.make_agile_uri(f"/board/{board_id}"), {
            "method": HttpMethod.DELETE,
        }))

    def get_configuration(self, board_id: str) -> Any:
        """Return the board's column, estimation and ranking configuration."""
        return self.do_request(self.make_request_header(self.make_agile_uri(f"/board/{board_id}/configuration")))

    def get_issues_for_backlog(
        self,
        board_id: str,
        start_at: int = 0,
        max_results: int = 50,
        jql: str | None = None,
        validate_query: bool = True,
        fields: str | None = None,
    ) -> Any:
        return self.do_request(self.make_request_header(self.make_agile_uri(
            f"/board/{board_id}/backlog",
            query=_issue_page_query(start_at, max_results, jql, validate_query, fields),
        )))

    def get_issues_for_board(
        self,
        board_id: str,
        start_at: int = 0,
        max_results: int = 50,
        jql: str | None = None,
        validate_query: bool = True,
        fields: str | None = None,
    ) -> Any:
        """Return every issue on a board, backlog included, optionally narrowed down by ``jql``."""
        return self.do_request(self.make_request_header(self.make_agile_uri(
            f"/board/{board_id}/issue",
            query=_issue_page_query(start_at, max_results, jql, validate_query, fields),
        )))

    def get_projects(self, board_id: str, start_at: int = 0, max_results: int = 50) -> Any:
        return self.do_request(self.make_request_header(self.make_agile_uri(
            f"/board/{board_id}/project",
            query={"startAt": start_at, "maxResults": max_results},
        )))

    def get_projects_full(self, board_id: str) -> Any:
        return self.do_request(self.make_request_header(self.make_agile_uri(f"/board/{board_id}/project/full")))

    def get_all_versions(
        self,
        board_id: str,
        start_at: int = 0,
        max_results: int = 50,
        released: bool | None = None,
    ) -> Any:
        return self.do_request(self.make_request_header(self.make_agile_uri(
            f"/board/{board_id}/version",
            query={"startAt": start_at, "maxResults": max_results, "released": released},
        )))

    def get_filter(self, filter_id: str) -> Any:
        return self.do_request(self.make_request_header(self.make_agile_uri(f"/filter/{filter_id}")))

    # ------------------------------------------------------------------
    # Board properties
    # ------------------------------------------------------------------

    def get_board_properties_keys(self, board_id: str) -> Any:
        return self.do_request(self.make_request_header(self.make_agile_uri(f"/board/{board_id}/properties")))

    def get_board_property(self, board_id: str, property_key: str) -> Any:
        return self.do_request(self.make_request_header(self.make_agile_uri(
            f"/board/{board_id}/properties/{property_key}",
        )))

    def set_board_property(self, board_id: str, property_key: str, body: Any) -> Any:
        return self.do_request(self.make_request_header(
            self.make_agile_uri(f"/board/{board_id}/properties/{property_key}"),
            {
                "method": HttpMethod.PUT,
                "body": body,
            },
        ))

    def delete_board_property(self, board_id: str, property_key: str) -> Any:
        return self.do_request(self.make_request_header(
            self.make_agile_uri(f"/board/{board_id}/properties/{property_key}"),
            {"method": HttpMethod.DELETE},
        ))

    # ------------------------------------------------------------------
    # Sprints
    # ------------------------------------------------------------------

    def get_sprint(self, sprint_id: str) -> Any:
        return self.do_request(self.make_request_header(self.make_agile_uri(f"/sprint/{sprint_id}")))

    def add_issue_to_sprint(self, issue_id: str, sprint_id: str) -> Any:
        """Move a single issue into a sprint."""
        return self.do_request(self.make_request_header(self.make_agile_uri(f"/sprint/{sprint_id}/issue"), {
            "method": HttpMethod.POST,
            "body": {"issues": [issue_id]},
        }))

    def get_all_sprints(
        self,
        board_id: str,
        start_at: int = 0,
        max_results: int = 50,
        state: str | None = None,
    ) -> Any:
        """List a board's sprints; ``state`` is a comma separated mix of 'future', 'active', 'closed'."""
        return self.do_request(self.make_request_header(self.make_agile_uri(
            f"/board/{board_id}/sprint",
            query={"startAt": start_at, "maxResults": max_results, "state": state},
        )))

    def get_board_issues_for_sprint(
        self,
        board_id: str,
        sprint_id: str,
        start_at: int = 0,
        max_results: int = 50,
        jql: str | None = None,
        validate_query: bool = True,
        fields: str | None = None,
        expand: str | None = None,
    ) -> Any:
        query = _issue_page_query(start_at, max_results, jql, validate_query, fields)
        query["expand"] = expand
        return self.do_request(self.make_request_header(self.make_agile_uri(
            f"/board/{board_id}/sprint/{sprint_id}/issue",
            query=query,
        )))

    # ------------------------------------------------------------------
    # Epics
    # ------------------------------------------------------------------

    def get_epics(self, board_id: str, start_at: int = 0, max_results: int = 50, done: bool | None = None) -> Any:
        return self.do_request(self.make_request_header(self.make_agile_uri(
            f"/board/{board_id}/epic",
            query={"startAt": start_at, "maxResults": max_results, "done": done},
        )))

    def get_board_issues_for_epic(
        self,
        board_id: str,
        epic_id: str,
        start_at: int = 0,
        max_results: int = 50,
        jql: str | None = None,
        validate_query: bool = True,
        fields: str | None = None,
    ) -> Any:
        return self.do_request(self.make_request_header(self.make_agile_uri(
            f"/board/{board_id}/epic/{epic_id}/issue",
            query=_issue_page_query(start_at, max_results, jql, validate_query, fields),
        )))

    def get_epic(self, epic_id_or_key: str) -> Any:
        return self.do_request(self.make_request_header(self.make_agile_uri(f"/epic/{epic_id_or_key}")))

    def partially_update_epic(self, epic_id_or_key: str, body: Mapping[str, Any]) -> Any:
        """Update only the given epic fields (name, summary, color, done)."""
        return self.do_request(self.make_request_header(self.make_agile_uri(f"/epic/{epic_id_or_key}"), {
            "method": HttpMethod.POST,
            "body": body,
        }))

    def get_issues_for_epic(
        self,
        epic_id: str,
        start_at: int = 0,
        max_results: int = 50,
        jql: str | None = None,
        validate_query: bool = True,
        fields: str | None = None,
    ) -> Any:
        return self.do_request(self.make_request_header(self.make_agile_uri(
            f"/epic/{epic_id}/issue",
            query=_issue_page_query(start_at, max_results, jql, validate_query, fields),
        )))

    def move_issues_to_epic(self, epic_id_or_key: str, issues: list[str]) -> Any:
        return self.do_request(self.make_request_header(self.make_agile_uri(f"/epic/{epic_id_or_key}/issue"), {
            "method": HttpMethod.POST,
            "body": {"issues": issues},
        }))

    def rank_epics(self, epic_id_or_key: str, body: Mapping[str, Any]) -> Any:
        return self.do_request(self.make_request_header(self.make_agile_uri(f"/epic/{epic_id_or_key}/rank"), {
            "method": HttpMethod.PUT,
            "body": body,
        }))

    def generic_agile_get(self, endpoint: str) -> Any:
        """GET /rest/agile/1.0/{endpoint}."""
        return self.do_request(self.make_request_header(self.make_agile_uri(f"/{endpoint}")))


def _issue_page_query(
    start_at: int,
    max_results: int,
    jql: str | None,
    validate_query: bool,
    fields: str | None,
) -> dict[str, Any]:
    return {
        "startAt": start_at,
        "maxResults": max_results,
        "jql": jql,
        "validateQuery": validate_query,
        "fields": fields,
    }
