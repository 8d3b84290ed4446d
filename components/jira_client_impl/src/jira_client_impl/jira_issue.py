"""Issue-level endpoints of the Jira REST API (/rest/api/{version})."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from jira_client_impl.jira_request import JiraRequestCore
from tracker_client_interface.request import HttpMethod


class IssueEndpoints(JiraRequestCore):
    """Issues and everything hanging off them: comments, worklogs, attachments, links, fields."""

    # ------------------------------------------------------------------
    # Issue CRUD (create, read, update, delete)
    # ------------------------------------------------------------------

    def find_issue(
        self,
        issue_number: str,
        expand: str | None = None,
        fields: str | None = None,
        properties: str | None = None,
        fields_by_keys: bool | None = None,
    ) -> Any:
        """Fetch a single issue by id or key.

        Args:
            issue_number:   The issue id or key, e.g. 'PROJ-42'
            expand:         Comma separated list of entities to expand
            fields:         Fields to return, defaults to every field ('*all')
            properties:     Issue properties to return, defaults to '*all'
            fields_by_keys: Treat the names in ``fields`` as field keys
        """
        return self.do_request(self.make_request_header(self.make_uri(
            f"/issue/{issue_number}",
            query={
                "expand": expand or "",
                "fields": fields or "*all",
                "properties": properties or "*all",
                "fieldsByKeys": fields_by_keys or False,
            },
        )))

    def add_new_issue(self, issue: Mapping[str, Any]) -> Any:
        """Create an issue from a {"fields": {...}} payload."""
        return self.do_request(self.make_request_header(self.make_uri("/issue"), {
            "method": HttpMethod.POST,
            "follow_all_redirects": True,
            "body": issue,
        }))

    def update_issue(
        self,
        issue_id: str,
        issue_update: Mapping[str, Any],
        query: Mapping[str, Any] | None = None,
    ) -> Any:
        """
        Args:
            issue_id:     The issue id or key
            issue_update: An "update"/"fields" payload as documented by Jira
            query:        Extra query parameters, e.g. {"notifyUsers": False}

        Notes on usage:
            Jira answers 204 No Content on success, so the default transport returns None.
        """
        return self.do_request(self.make_request_header(
            self.make_uri(f"/issue/{issue_id}", query=query or {}),
            {
                "body": issue_update,
                "method": HttpMethod.PUT,
                "follow_all_redirects": True,
            },
        ))

    def delete_issue(self, issue_id: str) -> Any:
        return self.do_request(self.make_request_header(self.make_uri(f"/issue/{issue_id}"), {
            "method": HttpMethod.DELETE,
            "follow_all_redirects": True,
        }))

    def get_issue_create_metadata(self, optional: Mapping[str, Any] | None = None) -> Any:
        """Return the create-screen metadata, filtered by e.g. projectKeys or issuetypeIds."""
        return self.do_request(self.make_request_header(self.make_uri(
            "/issue/createmeta",
            query=optional or {},
        )))

    # ------------------------------------------------------------------
    # Assignee, watchers, notifications
    # ------------------------------------------------------------------

    def update_assignee(self, issue_key: str, assignee_name: str) -> Any:
        """Assign by user name (Jira Server)."""
        return self.do_request(self.make_request_header(self.make_uri(f"/issue/{issue_key}/assignee"), {
            "method": HttpMethod.PUT,
            "follow_all_redirects": True,
            "body": {"name": assignee_name},
        }))

    def update_assignee_with_id(self, issue_key: str, user_id: str) -> Any:
        """Assign by account id (Jira Cloud)."""
        return self.do_request(self.make_request_header(self.make_uri(f"/issue/{issue_key}/assignee"), {
            "method": HttpMethod.PUT,
            "follow_all_redirects": True,
            "body": {"accountId": user_id},
        }))

    def add_watcher(self, issue_key: str, username: str) -> Any:
        #Jira expects the bare JSON string as body
        return self.do_request(self.make_request_header(self.make_uri(f"/issue/{issue_key}/watchers"), {
            "method": HttpMethod.POST,
            "follow_all_redirects": True,
            "body": username,
        }))

    def get_issue_watchers(self, issue_number: str) -> Any:
        return self.do_request(self.make_request_header(self.make_uri(f"/issue/{issue_number}/watchers")))

    def issue_notify(self, issue_id: str, notification_body: Mapping[str, Any]) -> Any:
        """Send an e-mail notification about the issue."""
        return self.do_request(self.make_request_header(self.make_uri(f"/issue/{issue_id}/notify"), {
            "method": HttpMethod.POST,
            "body": notification_body,
        }))

    # ------------------------------------------------------------------
    # Transitions, properties, history
    # ------------------------------------------------------------------

    def list_transitions(self, issue_id: str) -> Any:
        """List the transitions currently available for an issue, with their fields."""
        return self.do_request(self.make_request_header(self.make_uri(
            f"/issue/{issue_id}/transitions",
            query={"expand": "transitions.fields"},
        )))

    def transition_issue(self, issue_id: str, issue_transition: Mapping[str, Any]) -> Any:
        """
        Transitions are named actions in Jira that move one issue from one status to another.
        ``issue_transition`` is e.g. {"transition": {"id": "11"}}, ids come from list_transitions().
        """
        return self.do_request(self.make_request_header(self.make_uri(f"/issue/{issue_id}/transitions"), {
            "body": issue_transition,
            "method": HttpMethod.POST,
            "follow_all_redirects": True,
        }))

    def get_issue_property(self, issue_number: str, property_key: str) -> Any:
        return self.do_request(self.make_request_header(self.make_uri(
            f"/issue/{issue_number}/properties/{property_key}",
        )))

    def get_issue_changelog(self, issue_number: str, start_at: int = 0, max_results: int = 50) -> Any:
        return self.do_request(self.make_request_header(self.make_uri(
            f"/issue/{issue_number}/changelog",
            query={"startAt": start_at, "maxResults": max_results},
        )))

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    def add_comment(self, issue_id: str, comment: str) -> Any:
        """Add a plain text comment."""
        return self.do_request(self.make_request_header(self.make_uri(f"/issue/{issue_id}/comment"), {
            "body": {"body": comment},
            "method": HttpMethod.POST,
            "follow_all_redirects": True,
        }))

    def add_comment_advanced(self, issue_id: str, comment: Mapping[str, Any]) -> Any:
        """Add a comment given as a full payload, e.g. with a visibility restriction."""
        return self.do_request(self.make_request_header(self.make_uri(f"/issue/{issue_id}/comment"), {
            "body": comment,
            "method": HttpMethod.POST,
            "follow_all_redirects": True,
        }))

    def update_comment(
        self,
        issue_id: str,
        comment_id: str,
        comment: str,
        options: Mapping[str, Any] | None = None,
    ) -> Any:
        """Replace a comment's text. ``options`` are extra payload fields such as visibility."""
        return self.do_request(self.make_request_header(
            self.make_uri(f"/issue/{issue_id}/comment/{comment_id}"),
            {
                "body": {"body": comment, **(options or {})},
                "method": HttpMethod.PUT,
                "follow_all_redirects": True,
            },
        ))

    def get_comments(self, issue_id: str) -> Any:
        return self.do_request(self.make_request_header(self.make_uri(f"/issue/{issue_id}/comment")))

    def get_comment(self, issue_id: str, comment_id: str) -> Any:
        return self.do_request(self.make_request_header(self.make_uri(f"/issue/{issue_id}/comment/{comment_id}")))

    def delete_comment(self, issue_id: str, comment_id: str) -> Any:
        return self.do_request(self.make_request_header(self.make_uri(f"/issue/{issue_id}/comment/{comment_id}"), {
            "method": HttpMethod.DELETE,
            "follow_all_redirects": True,
        }))

    # ------------------------------------------------------------------
    # Worklogs
    # ------------------------------------------------------------------

    def add_worklog(
        self,
        issue_id: str,
        worklog: Mapping[str, Any],
        new_estimate: str | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> Any:
        """
        Args:
            issue_id:     The issue id or key
            worklog:      e.g. {"timeSpent": "1h 30m", "comment": "..."}
            new_estimate: Remaining estimate to set, e.g. '2d'. Jira adjusts it automatically when omitted
            options:      Extra query parameters, they win over the estimate parameters
        """
        query: dict[str, Any] = {"adjustEstimate": "new" if new_estimate else "auto"}
        if new_estimate:
            query["newEstimate"] = new_estimate
        query.update(options or {})

        return self.do_request(self.make_request_header(
            self.make_uri(f"/issue/{issue_id}/worklog", query=query),
            {
                "body": worklog,
                "method": HttpMethod.POST,
                "headers": {"Content-Type": "application/json"},
            },
        ))

    def updated_worklogs(self, since: int, expand: str | None = None) -> Any:
        """Worklogs updated after ``since`` (a unix timestamp in milliseconds)."""
        return self.do_request(self.make_request_header(
            self.make_uri("/worklog/updated", query={"since": since, "expand": expand}),
            {"headers": {"Content-Type": "application/json"}},
        ))

    def update_worklog(self, issue_id: str, worklog_id: str, body: Mapping[str, Any]) -> Any:
        return self.do_request(self.make_request_header(self.make_uri(f"/issue/{issue_id}/worklog/{worklog_id}"), {
            "method": HttpMethod.PUT,
            "body": body,
            "follow_all_redirects": True,
        }))

    def delete_worklog(self, issue_id: str, worklog_id: str) -> Any:
        return self.do_request(self.make_request_header(self.make_uri(f"/issue/{issue_id}/worklog/{worklog_id}"), {
            "method": HttpMethod.DELETE,
            "follow_all_redirects": True,
        }))

    def get_worklogs(self, worklog_ids: list[Any], expand: str | None = None) -> Any:
        """Fetch worklogs by id, at most 1000 per call."""
        return self.do_request(self.make_request_header(
            self.make_uri("/worklog/list", query={"expand": expand}),
            {
                "method": HttpMethod.POST,
                "body": {"ids": worklog_ids},
            },
        ))

    def get_issue_worklogs(self, issue_id: str, start_at: int = 0, max_results: int = 1000) -> Any:
        return self.do_request(self.make_request_header(self.make_uri(
            f"/issue/{issue_id}/worklog",
            query={"startAt": start_at, "maxResults": max_results},
        )))

    # ------------------------------------------------------------------
    # Attachments
    # ------------------------------------------------------------------

    def download_attachment(self, attachment: Mapping[str, Any]) -> Any:
        """Return the raw bytes of an attachment.

        ``attachment`` is an attachment object from an issue's fields; its
        ``id`` and ``filename`` are used. Attachments are served outside the
        REST API, from /secure/attachment.
        """
        return self.do_request(self.make_request_header(
            self.make_uri(
                f"/attachment/{attachment['id']}/{attachment['filename']}",
                intermediate_path="/secure",
                encode=True,
            ),
            {"json": False, "encoding": None},
        ))

    def delete_attachment(self, attachment_id: str) -> Any:
        return self.do_request(self.make_request_header(self.make_uri(f"/attachment/{attachment_id}"), {
            "method": HttpMethod.DELETE,
            "json": False,
            "encoding": None,
        }))

    def add_attachment_on_issue(self, issue_id: str, read_stream: Any) -> Any:
        """Upload a file (an open binary file object or a (name, fileobj) tuple)."""
        return self.do_request(self.make_request_header(self.make_uri(f"/issue/{issue_id}/attachments"), {
            "method": HttpMethod.POST,
            #Jira rejects multipart uploads without this header (XSRF check)
            "headers": {"X-Atlassian-Token": "nocheck"},
            "form_data": {"file": read_stream},
        }))

    # ------------------------------------------------------------------
    # Issue links
    # ------------------------------------------------------------------

    def issue_link(self, link: Mapping[str, Any]) -> Any:
        """Link two issues, e.g. {"type": {"name": "Blocks"}, "inwardIssue": {...}, "outwardIssue": {...}}."""
        return self.do_request(self.make_request_header(self.make_uri("/issueLink"), {
            "method": HttpMethod.POST,
            "follow_all_redirects": True,
            "body": link,
        }))

    def delete_issue_link(self, link_id: str) -> Any:
        return self.do_request(self.make_request_header(self.make_uri(f"/issueLink/{link_id}"), {
            "method": HttpMethod.DELETE,
            "follow_all_redirects": True,
        }))

    def list_issue_link_types(self) -> Any:
        return self.do_request(self.make_request_header(self.make_uri("/issueLinkType")))

    def get_remote_links(self, issue_number: str) -> Any:
        return self.do_request(self.make_request_header(self.make_uri(f"/issue/{issue_number}/remotelink")))

    def create_remote_link(self, issue_number: str, remote_link: Mapping[str, Any]) -> Any:
        return self.do_request(self.make_request_header(self.make_uri(f"/issue/{issue_number}/remotelink"), {
            "method": HttpMethod.POST,
            "body": remote_link,
        }))

    def delete_remote_link(self, issue_number: str, link_id: str) -> Any:
        return self.do_request(self.make_request_header(
            self.make_uri(f"/issue/{issue_number}/remotelink/{link_id}"),
            {
                "method": HttpMethod.DELETE,
                "follow_all_redirects": True,
            },
        ))

    # ------------------------------------------------------------------
    # Fields and field options
    # ------------------------------------------------------------------

    def create_custom_field(self, field: Mapping[str, Any]) -> Any:
        return self.do_request(self.make_request_header(self.make_uri("/field"), {
            "method": HttpMethod.POST,
            "follow_all_redirects": True,
            "body": field,
        }))

    def list_fields(self) -> Any:
        return self.do_request(self.make_request_header(self.make_uri("/field")))

    def create_field_option(self, field_key: str, option: Mapping[str, Any]) -> Any:
        return self.do_request(self.make_request_header(self.make_uri(f"/field/{field_key}/option"), {
            "method": HttpMethod.POST,
            "follow_all_redirects": True,
            "body": option,
        }))

    def list_field_options(self, field_key: str) -> Any:
        return self.do_request(self.make_request_header(self.make_uri(f"/field/{field_key}/option")))

    def upsert_field_option(self, field_key: str, option_id: str, option: Mapping[str, Any]) -> Any:
        return self.do_request(self.make_request_header(self.make_uri(f"/field/{field_key}/option/{option_id}"), {
            "method": HttpMethod.PUT,
            "follow_all_redirects": True,
            "body": option,
        }))

    def get_field_option(self, field_key: str, option_id: str) -> Any:
        return self.do_request(self.make_request_header(self.make_uri(f"/field/{field_key}/option/{option_id}")))

    def delete_field_option(self, field_key: str, option_id: str) -> Any:
        return self.do_request(self.make_request_header(self.make_uri(f"/field/{field_key}/option/{option_id}"), {
            "method": HttpMethod.DELETE,
            "follow_all_redirects": True,
        }))
