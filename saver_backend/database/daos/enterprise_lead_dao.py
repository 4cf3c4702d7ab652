"""
EnterpriseLead DAO

Create, list and re-status contact-sales leads.
"""

import logging
from uuid import UUID
from sqlalchemy import desc
from sqlalchemy.orm import Session
from saver_backend.database.entities.enterprise_leads import EnterpriseLead

logger = logging.getLogger("uvicorn")


class EnterpriseLeadDao:
    """
    Data Access Object (DAO) for managing EnterpriseLead entities.
    """

    def createLead(self, session: Session, lead: EnterpriseLead) -> EnterpriseLead:
        try:
            session.add(lead)
            session.flush()
            return lead
        except Exception as e:
            logger.error(f"Error in EnterpriseLeadDao.createLead. Error Message: {e}")
            raise e

    def fetchLeads(self, session: Session) -> list[EnterpriseLead]:
        """All leads, newest first."""
        try:
            return session.query(EnterpriseLead).order_by(desc(EnterpriseLead.created_at)).all()
        except Exception as e:
            logger.error(f"Error in EnterpriseLeadDao.fetchLeads. Error Message: {e}")
            raise e

    def updateLeadStatus(self, session: Session, lead_id: UUID, status: str) -> EnterpriseLead | None:
        try:
            lead = session.query(EnterpriseLead).filter(EnterpriseLead.id == lead_id).one_or_none()
            if lead is not None:
                lead.status = status
            return lead
        except Exception as e:
            logger.error(f"Error in EnterpriseLeadDao.updateLeadStatus. Error Message: {e}")
            raise e

    def countLeads(self, session: Session) -> int:
        try:
            return session.query(EnterpriseLead).count()
        except Exception as e:
            logger.error(f"Error in EnterpriseLeadDao.countLeads. Error Message: {e}")
            raise e
