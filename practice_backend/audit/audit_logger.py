# practice_backend/audit/audit_logger.py

import hashlib
import json
import logging
import os
import threading
from datetime import datetime

# Append-only security event trail. Each JSON line carries the hash of the
# previous line, so edits or deletions break the chain.

logger = logging.getLogger(__name__)


class AuditLogger:
    def __init__(self, log_dir='logs'):
        self.log_dir = log_dir
        self.log_file = os.path.join(log_dir, 'audit.log')
        self.previous_hash = None
        self._lock = threading.Lock()

        os.makedirs(log_dir, exist_ok=True)
        self._load_previous_hash()

    def _load_previous_hash(self):
        if not os.path.exists(self.log_file):
            return
        last_line = None
        with open(self.log_file, 'r') as f:
            for line in f:
                if line.strip():
                    last_line = line
        if last_line is None:
            return
        try:
            self.previous_hash = json.loads(last_line).get('hash')
        except json.JSONDecodeError:
            logger.warning("Audit log %s ends with a corrupt entry", self.log_file)
            self.previous_hash = None

    @staticmethod
    def _digest(entry):
        return hashlib.sha256(json.dumps(entry, sort_keys=True, default=str).encode()).hexdigest()

    def log_security_event(self, event_type, data, user_id=None):
        with self._lock:
            entry = {
                "timestamp": datetime.utcnow().isoformat(),
                "event_type": event_type,
                "data": data,
                "user_id": user_id,
                "previous_hash": self.previous_hash,
            }
            entry['hash'] = self._digest(entry)
            try:
                with open(self.log_file, 'a') as f:
                    f.write(json.dumps(entry, default=str) + "\n")
            except OSError as e:
                # losing an audit line must not fail the request
                logger.error("Audit log write failed: %s", e)
                return None
            self.previous_hash = entry['hash']
            return entry

    def read_entries(self):
        if not os.path.exists(self.log_file):
            return []
        with open(self.log_file, 'r') as f:
            return [json.loads(line) for line in f if line.strip()]

    def verify_log_integrity(self):
        previous_hash = None
        try:
            entries = self.read_entries()
        except json.JSONDecodeError:
            return False
        for entry in entries:
            if entry.get('previous_hash') != previous_hash:
                return False
            recorded = entry.pop('hash', None)
            if recorded != self._digest(entry):
                return False
            previous_hash = recorded
        return True
