"""Small CLI for driving a running ballotbox server.

Usage examples:
    ballotbox --caller authority enroll alice bob carol
    ballotbox --caller authority phase start-proposals
    ballotbox --caller alice propose "Plant more trees"
    ballotbox --caller alice vote 0
    ballotbox --caller authority tally
    ballotbox winner 0
"""

import argparse
import json
import sys
from typing import Any, Dict, Optional

import requests

from .config import CALLER_HEADER, load_settings

PHASE_ACTIONS = ["start-proposals", "end-proposals", "start-voting", "end-voting", "start-tie-session"]


class Client:
    """Thin wrapper around the HTTP API; every call returns the decoded JSON body."""

    def __init__(self, base: str, caller: str = "", timeout: float = 2.0):
        self.base = base.rstrip("/")
        self.caller = caller
        self.timeout = timeout

    def _request(self, method: str, path: str, body: Optional[Dict[str, Any]] = None, params=None) -> Dict[str, Any]:
        r = requests.request(
            method,
            f"{self.base}{path}",
            json=body,
            params=params,
            headers={CALLER_HEADER: self.caller},
            timeout=self.timeout,
        )
        try:
            return r.json()
        except ValueError:
            # Flask's own 404/405 pages are HTML
            return {"error": f"HTTP {r.status_code}", "detail": r.text[:200]}

    def enroll(self, ids):
        return self._request("POST", "/voters", {"ids": list(ids)})

    def revoke(self, ids):
        return self._request("DELETE", "/voters", {"ids": list(ids)})

    def phase(self, action: str):
        return self._request("POST", f"/phase/{action}")

    def propose(self, description: str):
        return self._request("POST", "/proposals", {"description": description})

    def proposals(self, session: Optional[int] = None):
        return self._request("GET", "/proposals", params=_session_params(session))

    def vote(self, proposal_id: int):
        return self._request("POST", "/votes", {"proposal_id": proposal_id})

    def tally(self):
        return self._request("POST", "/tally")

    def reset(self):
        return self._request("POST", "/reset")

    def status(self):
        return self._request("GET", "/status")

    def winner(self, session: int):
        return self._request("GET", f"/sessions/{session}/winner")

    def choice(self, participant: str, session: Optional[int] = None):
        return self._request("GET", f"/voters/{participant}/choice", params=_session_params(session))


def _session_params(session: Optional[int]):
    return None if session is None else {"session": session}


def build_parser() -> argparse.ArgumentParser:
    settings = load_settings()
    p = argparse.ArgumentParser(prog="ballotbox")
    p.add_argument("--base", default=settings.base_url)
    p.add_argument("--caller", default="")
    sub = p.add_subparsers(dest="cmd")
    s = sub.add_parser("enroll")
    s.add_argument("ids", nargs="+")
    s = sub.add_parser("revoke")
    s.add_argument("ids", nargs="+")
    s = sub.add_parser("phase")
    s.add_argument("action", choices=PHASE_ACTIONS)
    s = sub.add_parser("propose")
    s.add_argument("description")
    s = sub.add_parser("proposals")
    s.add_argument("--session", type=int)
    s = sub.add_parser("vote")
    s.add_argument("proposal_id", type=int)
    sub.add_parser("tally")
    sub.add_parser("reset")
    sub.add_parser("status")
    s = sub.add_parser("winner")
    s.add_argument("session", type=int)
    s = sub.add_parser("choice")
    s.add_argument("participant")
    s.add_argument("--session", type=int)
    return p


def run(args, client: Client) -> Optional[Dict[str, Any]]:
    if args.cmd == "enroll":
        return client.enroll(args.ids)
    elif args.cmd == "revoke":
        return client.revoke(args.ids)
    elif args.cmd == "phase":
        return client.phase(args.action)
    elif args.cmd == "propose":
        return client.propose(args.description)
    elif args.cmd == "proposals":
        return client.proposals(args.session)
    elif args.cmd == "vote":
        return client.vote(args.proposal_id)
    elif args.cmd == "tally":
        return client.tally()
    elif args.cmd == "reset":
        return client.reset()
    elif args.cmd == "status":
        return client.status()
    elif args.cmd == "winner":
        return client.winner(args.session)
    elif args.cmd == "choice":
        return client.choice(args.participant, args.session)
    return None


def main(argv=None):
    p = build_parser()
    args = p.parse_args(argv)
    if not args.cmd:
        p.print_help()
        return 1
    client = Client(args.base, args.caller, load_settings().http_timeout)
    try:
        result = run(args, client)
    except requests.RequestException as e:
        print(f"request failed: {e}", file=sys.stderr)
        return 2
    print(json.dumps(result, indent=2))
    return 1 if "error" in (result or {}) else 0


if __name__ == "__main__":
    sys.exit(main())
