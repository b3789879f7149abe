from sqlalchemy import Boolean, Column, String, false

from huddy_gate.db.base import Base, BaseModel

class Attendee(Base, BaseModel):
    __tablename__ = "attendees"

    name = Column(String, nullable=False)
    # Not unique: the same person may register more than once
    email = Column(String, index=True, nullable=False)
    unique_code = Column(String, unique=True, index=True, nullable=False)

    # Gate state
    is_entered = Column(Boolean, default=False, server_default=false(), nullable=False)
    is_gifted = Column(Boolean, default=False, server_default=false(), nullable=False)

    def __repr__(self):
        return f"<Attendee {self.name} ({self.email}) {self.unique_code}>"
