# sharedurl/models/lms.py
#
# Tables owned by the host LMS. The service reads them, and writes only
# through the enrolment, completion and event helpers.
from __future__ import annotations

from sqlalchemy import Column, BigInteger, SmallInteger, Text, UniqueConstraint

from sharedurl.models.sharedurl import Base, Id

CONTEXT_USER = 30
CONTEXT_COURSE = 50
CONTEXT_MODULE = 70


class Course(Base):
    __tablename__ = "course"

    id = Column(Id, primary_key=True, index=True)
    shortname = Column(Text, nullable=False, default="")
    fullname = Column(Text, nullable=False, default="")
    format = Column(Text, nullable=False, default="topics")


class CourseModule(Base):
    __tablename__ = "course_modules"

    id = Column(Id, primary_key=True, index=True)
    course = Column(BigInteger, nullable=False, index=True)
    modname = Column(Text, nullable=False)
    instance = Column(BigInteger, nullable=False)
    showdescription = Column(SmallInteger, nullable=False, default=0)


class Context(Base):
    __tablename__ = "context"
    __table_args__ = (UniqueConstraint("contextlevel", "instanceid"),)

    id = Column(Id, primary_key=True, index=True)
    contextlevel = Column(BigInteger, nullable=False)
    instanceid = Column(BigInteger, nullable=False)


class Enrol(Base):
    __tablename__ = "enrol"
    __table_args__ = (UniqueConstraint("courseid", "enrol"),)

    id = Column(Id, primary_key=True, index=True)
    enrol = Column(Text, nullable=False)
    courseid = Column(BigInteger, nullable=False, index=True)
    status = Column(SmallInteger, nullable=False, default=0)
    roleid = Column(BigInteger, nullable=False, default=0)
    enrolperiod = Column(BigInteger, nullable=False, default=0)
    enrolstartdate = Column(BigInteger, nullable=False, default=0)
    enrolenddate = Column(BigInteger, nullable=False, default=0)
    timecreated = Column(BigInteger, nullable=False, default=0)
    timemodified = Column(BigInteger, nullable=False, default=0)


class UserEnrolment(Base):
    __tablename__ = "user_enrolments"
    __table_args__ = (UniqueConstraint("enrolid", "userid"),)

    id = Column(Id, primary_key=True, index=True)
    enrolid = Column(BigInteger, nullable=False)
    userid = Column(BigInteger, nullable=False, index=True)
    status = Column(SmallInteger, nullable=False, default=0)
    timestart = Column(BigInteger, nullable=False, default=0)
    timeend = Column(BigInteger, nullable=False, default=0)
    timecreated = Column(BigInteger, nullable=False, default=0)
    timemodified = Column(BigInteger, nullable=False, default=0)


class RoleAssignment(Base):
    __tablename__ = "role_assignments"
    __table_args__ = (UniqueConstraint("roleid", "contextid", "userid", "component", "itemid"),)

    id = Column(Id, primary_key=True, index=True)
    roleid = Column(BigInteger, nullable=False)
    contextid = Column(BigInteger, nullable=False)
    userid = Column(BigInteger, nullable=False)
    component = Column(Text, nullable=False, default="")
    itemid = Column(BigInteger, nullable=False, default=0)
    timemodified = Column(BigInteger, nullable=False, default=0)


class CourseModuleCompletion(Base):
    __tablename__ = "course_modules_completion"
    __table_args__ = (UniqueConstraint("coursemoduleid", "userid"),)

    id = Column(Id, primary_key=True, index=True)
    coursemoduleid = Column(BigInteger, nullable=False)
    userid = Column(BigInteger, nullable=False)
    completionstate = Column(SmallInteger, nullable=False, default=0)
    viewed = Column(SmallInteger, nullable=False, default=0)
    timemodified = Column(BigInteger, nullable=False, default=0)


class LogEvent(Base):
    __tablename__ = "logstore"

    id = Column(Id, primary_key=True, index=True)
    eventname = Column(Text, nullable=False)
    component = Column(Text, nullable=False)
    action = Column(Text, nullable=False)
    target = Column(Text, nullable=False)
    objecttable = Column(Text, nullable=True)
    objectid = Column(BigInteger, nullable=True)
    contextid = Column(BigInteger, nullable=True)
    contextinstanceid = Column(BigInteger, nullable=True)
    userid = Column(BigInteger, nullable=False)
    courseid = Column(BigInteger, nullable=True)
    timecreated = Column(BigInteger, nullable=False, default=0)
