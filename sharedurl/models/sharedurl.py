# sharedurl/models/sharedurl.py
from __future__ import annotations

import json

from sqlalchemy import Column, BigInteger, Integer, SmallInteger, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# bigint ids, but plain INTEGER on sqlite so rowid autoincrement works
Id = BigInteger().with_variant(Integer, "sqlite")
MAX_ID = 2**63 - 1


class SharedUrl(Base):
    __tablename__ = "sharedurl"

    id = Column(Id, primary_key=True, index=True)
    course = Column(BigInteger, nullable=False, default=0, index=True)
    name = Column(Text, nullable=False)
    intro = Column(Text, nullable=True)
    introformat = Column(SmallInteger, nullable=False, default=0)
    externalurl = Column(Text, nullable=False)
    display = Column(SmallInteger, nullable=False, default=0)
    displayoptions = Column(Text, nullable=True)
    parameters = Column(Text, nullable=True)
    timemodified = Column(BigInteger, nullable=False, default=0)

    @property
    def options(self) -> dict:
        if not self.displayoptions:
            return {}
        try:
            data = json.loads(self.displayoptions)
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    @property
    def parameter_map(self) -> dict:
        if not self.parameters:
            return {}
        try:
            data = json.loads(self.parameters)
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}


class SharedUrlConfig(Base):
    """Site-wide settings overriding the environment defaults."""

    __tablename__ = "sharedurl_config"

    name = Column(Text, primary_key=True)
    value = Column(Text, nullable=True)
