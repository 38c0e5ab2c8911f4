# prompt_gallery/repositories/otp_repo.py
from sqlmodel import Session, select

from prompt_gallery.models.otp import OTP


class OTPRepository:
    """
    Data access layer for the OTP ledger.

    NOTE:
      - No commits here; issuing a code is delete-then-insert and must land
        as one unit. OTPService calls session.commit().
    """

    def delete_unverified(self, session: Session, email: str, purpose: str) -> int:
        """Delete every unverified code for (email, purpose); return how many."""
        stmt = select(OTP).where(
            OTP.email == email,
            OTP.purpose == purpose,
            OTP.verified == False,  # noqa: E712
        )
        rows = session.exec(stmt).all()
        for row in rows:
            session.delete(row)
        session.flush()
        return len(rows)

    def create(self, session: Session, otp: OTP) -> OTP:
        session.add(otp)
        session.flush()
        session.refresh(otp)
        return otp

    def find_latest(
        self,
        session: Session,
        email: str,
        code: str,
        verified: bool,
        purpose: str | None = None,
    ) -> OTP | None:
        """
        Most recent record matching (email, code, verified[, purpose]).
        """
        stmt = select(OTP).where(
            OTP.email == email,
            OTP.code == code,
            OTP.verified == verified,
        )
        if purpose is not None:
            stmt = stmt.where(OTP.purpose == purpose)
        stmt = stmt.order_by(OTP.created_at.desc(), OTP.id.desc())
        return session.exec(stmt).first()

    def update(self, session: Session, otp: OTP) -> OTP:
        session.add(otp)
        session.flush()
        return otp

    def delete(self, session: Session, otp: OTP) -> None:
        session.delete(otp)
        session.flush()
