"""
Lead capture for query alert sign-ups
"""

import logging
import re
import threading
import uuid
from collections import Counter
from datetime import datetime
from typing import List, Dict, Optional, Tuple

from .errors import LeadValidationError
from .models.schemas import Lead, LeadStats

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_QUERY_LENGTH = 2


class LeadStore:
    """In-memory store of alert sign-ups, one per email and query"""

    def __init__(self):
        self._leads: List[Lead] = []
        self._lock = threading.Lock()

    def capture(self, email: Optional[str], query: Optional[str], source: Optional[str] = None) -> Tuple[Lead, bool]:
        """
        Record a sign-up, or refresh an existing one for the same email and query.

        Args:
            email: Subscriber email
            query: Query to be alerted on
            source: Where the sign-up came from

        Returns:
            (lead, created)
        """
        if not email or not EMAIL_PATTERN.match(email.strip()):
            raise LeadValidationError("Valid email is required", code="invalid_email")
        if not query or len(query.strip()) < MIN_QUERY_LENGTH:
            raise LeadValidationError("Query is required", code="invalid_query")

        email = email.strip().lower()
        query = query.strip()

        with self._lock:
            for lead in self._leads:
                if lead.email == email and lead.query.lower() == query.lower():
                    lead.last_active = datetime.utcnow()
                    lead.request_count += 1
                    logger.info("leads.updated email=%s query=%s count=%d", email, query, lead.request_count)
                    return lead, False

            lead = Lead(
                id=str(uuid.uuid4()),
                email=email,
                query=query,
                source=source or "website",
            )
            self._leads.append(lead)

        logger.info("leads.created email=%s query=%s", email, query)
        return lead, True

    def list_leads(self, limit: int = 50) -> List[Lead]:
        """Most recent leads first"""
        with self._lock:
            return list(reversed(self._leads[-limit:]))

    def stats(self) -> LeadStats:
        with self._lock:
            leads = list(self._leads)

        query_counts = Counter(lead.query.lower() for lead in leads)
        source_counts: Dict[str, int] = {}
        for lead in leads:
            source_counts[lead.source or "unknown"] = source_counts.get(lead.source or "unknown", 0) + 1

        return LeadStats(
            total_leads=len(leads),
            active_leads=sum(1 for lead in leads if lead.status == "active"),
            top_queries=[{"query": q, "count": n} for q, n in query_counts.most_common(10)],
            recent_leads=list(reversed(leads[-10:])),
            leads_by_source=source_counts,
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._leads)
