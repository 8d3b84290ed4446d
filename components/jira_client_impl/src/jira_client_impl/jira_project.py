"""Project, version, component, user and webhook endpoints, plus search."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from jira_client_impl.jira_request import JiraRequestCore
from tracker_client_interface.request import HttpMethod

#statuses counted as open by get_users_issues()
_OPEN_STATUS_JQL = " AND status in (Open, 'In Progress', Reopened)"


class ProjectEndpoints(JiraRequestCore):
    """Endpoints that are not tied to a single issue."""

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def get_project(self, project: str) -> Any:
        """Fetch a project by id or key."""
        return self.do_request(self.make_request_header(self.make_uri(f"/project/{project}")))

    def create_project(self, project: Mapping[str, Any]) -> Any:
        return self.do_request(self.make_request_header(self.make_uri("/project/"), {
            "method": HttpMethod.POST,
            "body": project,
        }))

    def list_projects(self) -> Any:
        return self.do_request(self.make_request_header(self.make_uri("/project")))

    # ------------------------------------------------------------------
    # Versions
    # ------------------------------------------------------------------

    def get_versions(self, project: str, query: Mapping[str, Any] | None = None) -> Any:
        return self.do_request(self.make_request_header(self.make_uri(
            f"/project/{project}/versions",
            query=query or {},
        )))

    def get_version(self, version: str) -> Any:
        return self.do_request(self.make_request_header(self.make_uri(f"/version/{version}")))

    def create_version(self, version: Mapping[str, Any]) -> Any:
        return self.do_request(self.make_request_header(self.make_uri("/version"), {
            "method": HttpMethod.POST,
            "follow_all_redirects": True,
            "body": version,
        }))

    def update_version(self, version: Mapping[str, Any]) -> Any:
        """Update a version; ``version["id"]`` selects which one."""
        return self.do_request(self.make_request_header(self.make_uri(f"/version/{version['id']}"), {
            "method": HttpMethod.PUT,
            "follow_all_redirects": True,
            "body": version,
        }))

    def delete_version(
        self,
        version_id: str,
        move_fix_issues_to_id: str | None = None,
        move_affected_issues_to_id: str | None = None,
    ) -> Any:
        """
        Args:
            version_id:                 Version to delete
            move_fix_issues_to_id:      Version that takes over the fixVersion of affected issues
            move_affected_issues_to_id: Version that takes over the affectedVersion of affected issues
        """
        return self.do_request(self.make_request_header(self.make_uri(f"/version/{version_id}"), {
            "method": HttpMethod.DELETE,
            "follow_all_redirects": True,
            "qs": {
                "moveFixIssuesTo": move_fix_issues_to_id,
                "moveAffectedIssuesTo": move_affected_issues_to_id,
            },
        }))

    def move_version(self, version_id: str, position: Mapping[str, Any]) -> Any:
        """Reorder a version, ``position`` is {"position": "First"} or {"after": <version uri>}."""
        return self.do_request(self.make_request_header(self.make_uri(f"/version/{version_id}/move"), {
            "method": HttpMethod.POST,
            "follow_all_redirects": True,
            "body": position,
        }))

    def get_unresolved_issue_count(self, version: str) -> Any:
        """Return the number of unresolved issues for a version."""
        response = self.do_request(self.make_request_header(self.make_uri(
            f"/version/{version}/unresolvedIssueCount",
        )))
        return response["issuesUnresolvedCount"]

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    def list_components(self, project: str) -> Any:
        return self.do_request(self.make_request_header(self.make_uri(f"/project/{project}/components")))

    def add_new_component(self, component: Mapping[str, Any]) -> Any:
        return self.do_request(self.make_request_header(self.make_uri("/component"), {
            "method": HttpMethod.POST,
            "follow_all_redirects": True,
            "body": component,
        }))

    def update_component(self, component_id: str, component: Mapping[str, Any]) -> Any:
        return self.do_request(self.make_request_header(self.make_uri(f"/component/{component_id}"), {
            "method": HttpMethod.PUT,
            "follow_all_redirects": True,
            "body": component,
        }))

    def delete_component(self, component_id: str, move_issues_to: str | None = None) -> Any:
        """Delete a component, optionally moving its issues to another one."""
        return self.do_request(self.make_request_header(self.make_uri(f"/component/{component_id}"), {
            "method": HttpMethod.DELETE,
            "follow_all_redirects": True,
            "qs": {"moveIssuesTo": move_issues_to} if move_issues_to else None,
        }))

    def related_issue_counts(self, component_id: str) -> Any:
        return self.do_request(self.make_request_header(self.make_uri(
            f"/component/{component_id}/relatedIssueCounts",
        )))

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search_jira(self, search_string: str, optional: Mapping[str, Any] | None = None) -> Any:
        """Run a JQL search.

        Args:
            search_string: The JQL query, e.g. 'project = PROJ ORDER BY updated DESC'
            optional:      Extra body fields: startAt, maxResults, fields, expand, ...

        Returns:
            The search result page as returned by Jira
        """
        return self.do_request(self.make_request_header(self.make_uri("/search"), {
            "method": HttpMethod.POST,
            "follow_all_redirects": True,
            "body": {"jql": search_string, **(optional or {})},
        }))

    def get_users_issues(self, username: str, open_only: bool = False) -> Any:
        """Search the issues assigned to ``username``, only open ones when ``open_only`` is set."""
        #JQL needs the @ of an e-mail style user name escaped
        assignee = username.replace("@", "\\u0040", 1)
        open_jql = _OPEN_STATUS_JQL if open_only else ""
        return self.search_jira(f"assignee = {assignee}{open_jql}", {})

    # ------------------------------------------------------------------
    # Users and groups
    # ------------------------------------------------------------------

    def create_user(self, user: Mapping[str, Any]) -> Any:
        return self.do_request(self.make_request_header(self.make_uri("/user"), {
            "method": HttpMethod.POST,
            "follow_all_redirects": True,
            "body": user,
        }))

    def search_users(
        self,
        username: str | None = None,
        query: str | None = None,
        start_at: int = 0,
        max_results: int = 50,
        include_active: bool = True,
        include_inactive: bool = False,
    ) -> Any:
        return self.do_request(self.make_request_header(
            self.make_uri("/user/search", query={
                "username": username,
                "query": query,
                "startAt": start_at or 0,
                "maxResults": max_results or 50,
                "includeActive": include_active,
                "includeInactive": include_inactive,
            }),
            {"follow_all_redirects": True},
        ))

    def get_users_in_group(self, groupname: str, start_at: int = 0, max_results: int = 50) -> Any:
        return self.do_request(self.make_request_header(
            self.make_uri("/group", query={
                "groupname": groupname,
                "expand": f"users[{start_at}:{max_results}]",
            }),
            {"follow_all_redirects": True},
        ))

    def get_members_of_group(
        self,
        groupname: str,
        start_at: int = 0,
        max_results: int = 50,
        include_inactive_users: bool = False,
    ) -> Any:
        return self.do_request(self.make_request_header(
            self.make_uri("/group/member", query={
                "groupname": groupname,
                "expand": f"users[{start_at}:{max_results}]",
                "includeInactiveUsers": include_inactive_users,
            }),
            {"follow_all_redirects": True},
        ))

    def get_user(self, account_id: str, expand: str | None = None) -> Any:
        return self.do_request(self.make_request_header(self.make_uri(
            "/user",
            query={"accountId": account_id, "expand": expand},
        )))

    def get_users(self, start_at: int = 0, max_results: int = 100) -> Any:
        return self.do_request(self.make_request_header(self.make_uri(
            "/users",
            query={"startAt": start_at, "maxResults": max_results},
        )))

    def get_current_user(self) -> Any:
        """Return the user the client is authenticated as."""
        return self.do_request(self.make_request_header(self.make_uri("/myself")))

    # ------------------------------------------------------------------
    # Instance metadata
    # ------------------------------------------------------------------

    def list_priorities(self) -> Any:
        return self.do_request(self.make_request_header(self.make_uri("/priority")))

    def list_issue_types(self) -> Any:
        return self.do_request(self.make_request_header(self.make_uri("/issuetype")))

    def list_status(self) -> Any:
        return self.do_request(self.make_request_header(self.make_uri("/status")))

    def get_server_info(self) -> Any:
        return self.do_request(self.make_request_header(self.make_uri("/serverInfo")))

    # ------------------------------------------------------------------
    # Webhooks (/rest/webhooks/{webhook_version})
    # ------------------------------------------------------------------

    def register_webhook(self, webhook: Mapping[str, Any]) -> Any:
        return self.do_request(self.make_request_header(self.make_webhook_uri("/webhook"), {
            "method": HttpMethod.POST,
            "body": webhook,
        }))

    def list_webhooks(self) -> Any:
        return self.do_request(self.make_request_header(self.make_webhook_uri("/webhook")))

    def get_webhook(self, webhook_id: str) -> Any:
        return self.do_request(self.make_request_header(self.make_webhook_uri(f"/webhook/{webhook_id}")))

    def delete_webhook(self, webhook_id: str) -> Any:
        return self.do_request(self.make_request_header(self.make_webhook_uri(f"/webhook/{webhook_id}"), {
            "method": HttpMethod.DELETE,
        }))

    # ------------------------------------------------------------------
    # Escape hatch for endpoints without a dedicated method
    # ------------------------------------------------------------------

    def generic_get(self, endpoint: str) -> Any:
        """GET /rest/api/{version}/{endpoint}, e.g. generic_get("dashboard")."""
        return self.do_request(self.make_request_header(self.make_uri(f"/{endpoint}")))
