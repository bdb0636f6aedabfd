"""
Racing moderators against a file-backed database.
"""
import threading

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from clubhq.content_store import ContentStore, DocumentBase
from clubhq.errors import ConflictError
from clubhq.models.enums import ContentKind, ContentStatus, UserRole
from clubhq.notifications import EventManager
from clubhq.services.moderation import ModerationWorkflow


class Moderator:
    """Stand-in for a signed-in moderator account."""

    def __init__(self, id, role=UserRole.ADMIN.value):
        self.id = id
        self.role = role


def test_concurrent_decisions_exactly_one_wins(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'content.db'}",
        connect_args={"check_same_thread": False, "timeout": 10},
    )
    DocumentBase.metadata.create_all(bind=engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    setup = Session()
    doc = ContentStore(setup).insert(
        ContentKind.PROJECT,
        {"title": "Community Garden", "description": "Beds"},
        created_by=1,
    )
    record_id = doc.id
    setup.close()

    moderators = [Moderator(10), Moderator(20, UserRole.SUPER_ADMIN.value)]
    decisions = ["approve", "reject"]
    barrier = threading.Barrier(len(moderators))
    outcomes = {}

    def decide(moderator, decision):
        session = Session()
        workflow = ModerationWorkflow(ContentStore(session), events=EventManager())
        try:
            barrier.wait()
            result = getattr(workflow, decision)(ContentKind.PROJECT, record_id, moderator)
            outcomes[moderator.id] = ("ok", result.status)
        except ConflictError as e:
            outcomes[moderator.id] = ("conflict", e.details["current_status"])
        finally:
            session.close()

    threads = [threading.Thread(target=decide, args=pair) for pair in zip(moderators, decisions)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    kinds = sorted(outcome[0] for outcome in outcomes.values())
    assert kinds == ["conflict", "ok"]

    check = Session()
    final = ContentStore(check).get(ContentKind.PROJECT, record_id)
    winner_id = next(mid for mid, outcome in outcomes.items() if outcome[0] == "ok")
    loser = next(outcome for outcome in outcomes.values() if outcome[0] == "conflict")
    assert final.approved_by == winner_id
    assert final.status == outcomes[winner_id][1]
    assert loser[1] == final.status
    assert final.status in (ContentStatus.APPROVED.value, ContentStatus.REJECTED.value)
    check.close()
    engine.dispose()
