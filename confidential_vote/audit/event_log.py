# confidential_vote/audit/event_log.py

import os
import json
import hashlib
import base64
import logging
from datetime import datetime, timezone
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

# Append-only election event log with hash chaining and Ed25519 signatures.
# Entries carry handles, principals and public counters only, never plaintexts.

logger = logging.getLogger(__name__)


class ElectionEventLog:
    def __init__(self, log_dir='logs', signing_key=None):
        self.log_dir = log_dir
        self.log_file = os.path.join(log_dir, 'events.log')
        self.previous_hash = None

        os.makedirs(log_dir, exist_ok=True)

        self.signing_key = signing_key or Ed25519PrivateKey.generate()
        self._load_previous_hash()

    def _load_previous_hash(self):
        if os.path.exists(self.log_file):
            with open(self.log_file, 'r') as f:
                lines = [line for line in f.readlines() if line.strip()]
                if lines:
                    try:
                        last_entry = json.loads(lines[-1])
                        self.previous_hash = last_entry.get('hash')
                    except ValueError:
                        self.previous_hash = None

    def log_event(self, event_type, data, principal=None):
        try:
            log_entry = {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "event_type": event_type,
                "data": data,
                "principal": principal,
                "previous_hash": self.previous_hash,
            }
            entry_json = json.dumps(log_entry, sort_keys=True)
            entry_hash = hashlib.sha256(entry_json.encode()).hexdigest()

            signature = self.signing_key.sign(entry_json.encode())
            log_entry['hash'] = entry_hash
            log_entry['signature'] = base64.b64encode(signature).decode()

            with open(self.log_file, 'a') as f:
                f.write(json.dumps(log_entry) + "\n")

            self.previous_hash = entry_hash
        except Exception:
            # an unwritable log never blocks the election itself
            logger.exception(f"Failed to write {event_type} event")

    def read_events(self, event_type=None):
        if not os.path.exists(self.log_file):
            return []
        events = []
        with open(self.log_file, 'r') as f:
            for line in f:
                if not line.strip():
                    continue
                entry = json.loads(line)
                if event_type is None or entry.get('event_type') == event_type:
                    events.append(entry)
        return events

    def verify_log_integrity(self):
        try:
            if not os.path.exists(self.log_file):
                return True
            public_key = self.signing_key.public_key()
            previous_hash = None
            with open(self.log_file, 'r') as f:
                for line in f:
                    if not line.strip():
                        continue
                    log_entry = json.loads(line)
                    if log_entry.get('previous_hash') != previous_hash:
                        return False
                    entry_copy = dict(log_entry)
                    signature = base64.b64decode(entry_copy.pop('signature'))
                    entry_hash = entry_copy.pop('hash')
                    entry_json = json.dumps(entry_copy, sort_keys=True).encode()
                    if hashlib.sha256(entry_json).hexdigest() != entry_hash:
                        return False
                    public_key.verify(signature, entry_json)
                    previous_hash = entry_hash
            return True
        except Exception:
            return False
