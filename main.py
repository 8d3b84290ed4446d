#This file is for development purposes only

import logging

from jira_client_impl import JiraError, get_client
from tracker_client_interface import TransportError


def main():
    logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    client = get_client(interactive=True)

    print("\nFetching server info...")
    try:
        info = client.get_server_info()
        print(f"- {info.get('serverTitle')} {info.get('version')}")
    except (JiraError, TransportError) as e:
        print(f"Error connecting to Jira: {e}")

    print("\nFetching recent issues...")
    try:
        result = client.search_jira("project IS NOT EMPTY ORDER BY updated DESC", {"maxResults": 5})
        for issue in result.get("issues", []):
            print(f"- {issue['key']}: {issue['fields'].get('summary')}")
    except (JiraError, TransportError) as e:
        print(f"Error connecting to Jira: {e}")

if __name__ == "__main__":
    main()
