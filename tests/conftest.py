import json

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from sharedurl.core.db import get_db
from sharedurl.core.security import create_session_token
from sharedurl.main import app
from sharedurl.models.lms import CONTEXT_COURSE, CONTEXT_MODULE, Context, Course, CourseModule, Enrol, UserEnrolment
from sharedurl.models.sharedurl import Base, SharedUrl, SharedUrlConfig

SITE = "https://site"


class Lms:
    """Seeds host LMS records for a test."""

    def __init__(self, session):
        self.session = session

    def course(self, shortname="C", fullname="Course", format="topics") -> int:
        course = Course(shortname=shortname, fullname=fullname, format=format)
        self.session.add(course)
        self.session.flush()
        self.session.add(Context(contextlevel=CONTEXT_COURSE, instanceid=course.id))
        self.session.commit()
        return course.id

    def module(self, course_id, modname="page", instance=1, showdescription=0) -> int:
        cm = CourseModule(course=course_id, modname=modname, instance=instance, showdescription=showdescription)
        self.session.add(cm)
        self.session.flush()
        self.session.add(Context(contextlevel=CONTEXT_MODULE, instanceid=cm.id))
        self.session.commit()
        return cm.id

    def context_id(self, contextlevel, instanceid) -> int:
        return (
            self.session.query(Context.id)
            .filter(Context.contextlevel == contextlevel, Context.instanceid == instanceid)
            .scalar()
        )

    def enrol(self, course_id, user_id, method="manual", timeend=0) -> None:
        instance = self.session.query(Enrol).filter_by(courseid=course_id, enrol=method).first()
        if instance is None:
            instance = Enrol(enrol=method, courseid=course_id, roleid=5)
            self.session.add(instance)
            self.session.flush()
        self.session.add(UserEnrolment(enrolid=instance.id, userid=user_id, timestart=0, timeend=timeend))
        self.session.commit()

    def sharedurl(self, course_id, externalurl, display=0, options=None, name="Shared activity",
                  intro="", introformat=1, showdescription=0):
        instance = SharedUrl(
            course=course_id,
            name=name,
            intro=intro,
            introformat=introformat,
            externalurl=externalurl,
            display=display,
            displayoptions=json.dumps(options or {}),
            parameters="{}",
            timemodified=1,
        )
        self.session.add(instance)
        self.session.flush()
        cmid = self.module(course_id, modname="sharedurl", instance=instance.id, showdescription=showdescription)
        return instance.id, cmid

    def setting(self, name, value) -> None:
        self.session.merge(SharedUrlConfig(name=name, value=str(value)))
        self.session.commit()


@pytest.fixture()
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def lms(db):
    return Lms(db)


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app, base_url=SITE) as c:
        yield c
    app.dependency_overrides.clear()


def auth(user_id=100, caps=(), lang="en") -> dict:
    token = create_session_token(user_id=user_id, capabilities=caps, lang=lang)
    return {"Authorization": f"Bearer {token}"}
