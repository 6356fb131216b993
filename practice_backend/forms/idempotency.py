# practice_backend/forms/idempotency.py

import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError

from practice_backend.database.models import FormSubmission
from practice_backend.errors import BadRequest

logger = logging.getLogger(__name__)


@dataclass
class SubmissionResult:
    submission: FormSubmission
    duplicate: bool

    @property
    def status_code(self):
        return 200 if self.duplicate else 201


class IdempotencyLedger:
    """At most one stored FormSubmission per idempotency key.

    The lookup is only a fast path. Two requests with the same key can both
    miss it; the unique index on ``submission_hash`` then rejects the slower
    insert, which is answered with the record that won.

    Keys are global and first-writer-wins: reusing a key with a different
    payload returns the original record unchanged.
    """

    def __init__(self, session):
        self.session = session

    def find(self, key):
        return self.session.query(FormSubmission).filter_by(submission_hash=key).first()

    def submit(self, key, user_id, form_data) -> SubmissionResult:
        if not key or not key.strip():
            raise BadRequest("Idempotency-Key header required")

        existing = self.find(key)
        if existing is not None:
            logger.info("Duplicate submission for key %s", key)
            return SubmissionResult(existing, duplicate=True)

        submission = FormSubmission(user_id=user_id, form_data=form_data, submission_hash=key)
        self.session.add(submission)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            winner = self.find(key)
            if winner is None:
                # not a key collision
                raise
            logger.info("Concurrent submission for key %s resolved to %s", key, winner.id)
            return SubmissionResult(winner, duplicate=True)

        return SubmissionResult(submission, duplicate=False)
