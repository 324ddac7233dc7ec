"""
AWS Lambda function to trigger lawsuit acquisition via the API endpoint.

Deploy this to Lambda and schedule with EventBridge for periodic acquisition runs.
"""

import json
import os
import urllib.error
import urllib.request
from typing import Any, Dict


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Trigger acquisition via API endpoint.

    Environment Variables:
        API_URL: The service base URL (e.g., https://xxx.awsapprunner.com)
        ACQUISITION_TIMEOUT: Request timeout in seconds (default: 300)

    Event:
        source_id (optional): run a single data source instead of all of them

    EventBridge Rule Example:
        Schedule: cron(0 */6 * * ? *)  # Every 6 hours
    """
    api_url = os.environ.get("API_URL")
    if not api_url:
        return {"statusCode": 500, "body": json.dumps({"error": "API_URL environment variable not set"})}

    timeout = int(os.environ.get("ACQUISITION_TIMEOUT", "300"))

    source_id = (event or {}).get("source_id")
    path = f"/acquisition/run/{source_id}" if source_id else "/acquisition/run-all"
    endpoint = f"{api_url.rstrip('/')}{path}"

    request = urllib.request.Request(
        endpoint,
        method="POST",
        headers={"Content-Type": "application/json", "User-Agent": "LawsuitAcquisitionTrigger/1.0"},
    )

    try:
        print(f"Triggering acquisition at: {endpoint}")

        with urllib.request.urlopen(request, timeout=timeout) as response:
            result = json.loads(response.read().decode("utf-8"))

            print(f"Acquisition completed: {json.dumps(result, indent=2)}")

            return {"statusCode": 200, "body": json.dumps({"success": result.get("success", False), "acquisition_result": result})}

    except urllib.error.HTTPError as e:
        error_body = e.read().decode("utf-8") if e.fp else str(e)
        print(f"Acquisition request failed with HTTP {e.code}: {error_body}")

        return {"statusCode": e.code, "body": json.dumps({"success": False, "error": f"HTTP {e.code}: {error_body}"})}

    except urllib.error.URLError as e:
        print(f"Acquisition request failed: {str(e)}")

        return {"statusCode": 500, "body": json.dumps({"success": False, "error": f"Connection error: {str(e)}"})}


# For local testing
if __name__ == "__main__":
    import sys

    if len(sys.argv) > 1:
        os.environ["API_URL"] = sys.argv[1]

    event = {"source_id": sys.argv[2]} if len(sys.argv) > 2 else {}
    print(json.dumps(lambda_handler(event, None), indent=2))
