"""Demo runner: one election that ties, narrows, ties again and is drawn.

Run this script from the repository root:
    python run_election.py [--timestamp N --beacon N]
"""

import argparse

from ballotbox import FixedEntropy, HostEntropy, VotingEngine
from ballotbox.config import load_settings
from ballotbox.events import RecordingSink, event_to_dict
from ballotbox.logging_cfg import configure_logging


def _print_heading(msg: str):
    print()
    print(msg)


def _print_kv(key: str, value):
    print(f"  {key}: {value}")


def _print_counts(engine: VotingEngine):
    for i, p in enumerate(engine.list_proposals()):
        flag = "" if p.active else " (inactive)"
        _print_kv(f"#{i} {p.description}", f"{p.vote_count}{flag}")


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--timestamp", type=int)
    parser.add_argument("--beacon", type=int, default=0)
    args = parser.parse_args()

    settings = load_settings()
    configure_logging(settings.log_level, settings.log_format)

    entropy = FixedEntropy(args.timestamp, args.beacon) if args.timestamp is not None else HostEntropy()
    sink = RecordingSink()
    authority = settings.authority
    engine = VotingEngine(authority, entropy=entropy, sink=sink)
    voters = ["alice", "bob", "carol", "dave"]

    _print_heading("[1] Registering voters")
    for vid in engine.enroll(authority, voters):
        _print_kv("enrolled", vid)

    _print_heading("[2] Proposals")
    engine.start_proposals_registering(authority)
    for vid, text in zip(voters, ["Parks", "Roads", "Library"]):
        pid = engine.submit_proposal(vid, text)
        _print_kv(f"proposal {pid}", f"{text} (by {vid})")
    engine.end_proposals_registering(authority)

    _print_heading("[3] Voting round 1")
    engine.start_voting_session(authority)
    for vid, choice in zip(voters, [0, 1, 0, 1]):
        engine.vote(vid, choice)
    engine.end_voting_session(authority)
    _print_counts(engine)

    outcome = engine.tally_votes(authority)
    _print_kv("tally", f"{outcome.kind} {list(outcome.tied_ids)}")

    round_no = 2
    while not outcome.finalized:
        _print_heading(f"[{round_no + 2}] Tie round {round_no}")
        engine.start_tie_session(authority)
        active = engine.session.active_ids()
        for vid, choice in zip(voters, [active[0], active[-1]] * len(voters)):
            engine.vote(vid, choice)
        engine.end_voting_session(authority)
        _print_counts(engine)
        outcome = engine.tally_votes(authority)
        _print_kv("tally", f"{outcome.kind} {list(outcome.tied_ids)}")
        round_no += 1

    _print_heading("Result")
    session = engine.current_session
    winner = engine.winning_proposal(session)
    _print_kv("session", session)
    _print_kv("winner", f"#{engine.winner_of(session)} {winner.description}")
    _print_kv("drawn at random", outcome.kind == "random")
    _print_kv("phase", engine.phase.name)

    print("\nEvents:")
    for e in sink.events:
        print(" ", event_to_dict(e))


if __name__ == "__main__":
    main()
