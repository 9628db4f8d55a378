"""Print conversations and mentor response times from a running inspector."""
import sys

import httpx

BASE = "http://localhost:8000/api/v1"
client = httpx.Client(timeout=15)

params = {}
if len(sys.argv) > 1:
    params["engagement"] = sys.argv[1]

r = client.get(f"{BASE}/conversations", params=params)
r.raise_for_status()
conversations = r.json()
print(f"=== {len(conversations)} conversation(s) ===\n")

for conv in conversations:
    engagement = conv["engagement"]
    if engagement:
        label = engagement["title"]
    elif conv["engagements"]:
        label = "ambiguous: " + ", ".join(e["title"] for e in conv["engagements"])
    else:
        label = "(no engagement)"
    print(f"Conversation {conv['uuid']} [{conv['conversationType']}] {label}")
    for user in conv["users"]:
        details = user["details"]
        name = details["fullName"] if details else "Unknown user"
        print(f"    - {name} ({user['uuid']})")

    r2 = client.get(f"{BASE}/messages/{conv['uuid']}")
    if r2.status_code == 200:
        data = r2.json()
        timing = data["mentorResponseTime"]
        avg = timing["averageTimeFormatted"] if timing else "n/a"
        print(f"    messages: {data['totalCount']}, mentor avg response: {avg}")
    print()
