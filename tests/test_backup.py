import json
import xml.etree.ElementTree as ET

import pytest

from conftest import SITE, auth
from sharedurl.core.auth import CAP_ADD_INSTANCE
from sharedurl.core.display import DisplayMode
from sharedurl.lang.strings import get_string

EDITOR = auth(caps=(CAP_ADD_INSTANCE,))


@pytest.fixture()
def course(lms):
    return lms.course()


def test_backup_contains_activity_fields(client, lms, course):
    instance_id, cmid = lms.sharedurl(
        course, f"{SITE}/mod/quiz/view.php?id=42", display=int(DisplayMode.POPUP),
        options={"popupwidth": 700, "popupheight": 500}, intro="Week 2",
    )

    resp = client.get(f"/sharedurl/instances/{instance_id}/backup", headers=EDITOR)

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("application/xml")
    root = ET.fromstring(resp.content)
    assert root.tag == "activity"
    assert root.get("moduleid") == str(cmid)
    assert root.get("modulename") == "sharedurl"
    node = root.find("sharedurl")
    assert node.get("id") == str(instance_id)
    assert node.findtext("name") == "Shared activity"
    assert node.findtext("externalurl") == f"{SITE}/mod/quiz/view.php?id=42"
    assert node.findtext("intro") == "Week 2"
    assert node.findtext("display") == str(int(DisplayMode.POPUP))
    assert json.loads(node.findtext("displayoptions")) == {"popupwidth": 700, "popupheight": 500}


def test_restore_into_another_course(client, lms, course):
    instance_id, _ = lms.sharedurl(course, f"{SITE}/mod/quiz/view.php?id=42&x=1", display=int(DisplayMode.NEW))
    other = lms.course(shortname="OTHER")
    data = client.get(f"/sharedurl/instances/{instance_id}/backup", headers=EDITOR).content

    resp = client.post(f"/sharedurl/courses/{other}/restore", content=data, headers=EDITOR)

    assert resp.status_code == 201
    body = resp.json()
    assert body["id"] != instance_id
    assert body["course"] == other
    assert body["externalurl"] == f"{SITE}/mod/quiz/view.php?id=42&x=1"
    assert body["display"] == int(DisplayMode.NEW)
    assert body["timemodified"] == 1
    assert client.get(f"/sharedurl/modules/{body['cmid']}/info", headers=auth()).status_code == 200


def test_restore_of_backup_without_display_uses_site_defaults(client, course):
    data = (
        "<activity><sharedurl id='3'>"
        "<name>Old activity</name><intro></intro><introformat>1</introformat>"
        f"<externalurl>{SITE}/mod/page/view.php?id=7</externalurl>"
        "<parameters></parameters><timemodified>1600000000</timemodified>"
        "</sharedurl></activity>"
    )

    resp = client.post(f"/sharedurl/courses/{course}/restore", content=data, headers=EDITOR)

    assert resp.status_code == 201
    body = resp.json()
    assert body["display"] == int(DisplayMode.AUTO)
    assert body["displayoptions"] == {"printintro": 1}
    assert body["parameters"] == {}


@pytest.mark.parametrize(
    "data",
    [
        "not xml at all",
        "<activity><page id='1'/></activity>",
        "<activity><sharedurl id='1'><name>x</name></sharedurl></activity>",
        "<sharedurl><name></name><externalurl>http://a</externalurl></sharedurl>",
        "<sharedurl><name>x</name><externalurl>http://a</externalurl><introformat>html</introformat></sharedurl>",
    ],
)
def test_restore_rejects_invalid_backups(client, course, data):
    resp = client.post(f"/sharedurl/courses/{course}/restore", content=data, headers=EDITOR)

    assert resp.status_code == 400
    assert resp.json()["detail"] == {"field": "backup", "message": get_string("invalidbackup")}


def test_backup_and_restore_require_editor(client, lms, course):
    instance_id, _ = lms.sharedurl(course, f"{SITE}/mod/quiz/view.php?id=42")

    assert client.get(f"/sharedurl/instances/{instance_id}/backup", headers=auth()).status_code == 403
    assert client.post(f"/sharedurl/courses/{course}/restore", content="<x/>", headers=auth()).status_code == 403


def test_unknown_instance_or_course(client, course):
    assert client.get("/sharedurl/instances/999/backup", headers=EDITOR).status_code == 404
    assert client.post("/sharedurl/courses/999/restore", content="<x/>", headers=EDITOR).status_code == 404


@pytest.mark.parametrize(
    "display, options, expected_display, expected_options",
    [
        ("4", '{"popupwidth": 9, "printintro": 1}', DisplayMode.AUTO, {"printintro": 1}),
        ("99", "{}", DisplayMode.AUTO, {"printintro": 1}),
        ("6", '{"popupwidth": 9, "printintro": 1}', DisplayMode.POPUP, {"popupwidth": 9, "popupheight": 450}),
        ("2", '{"printintro": 0, "popupheight": 300}', DisplayMode.FRAME, {"printintro": 0}),
        ("5", "not json", DisplayMode.OPEN, {}),
    ],
)
def test_restore_rebuilds_display_options(client, course, display, options, expected_display, expected_options):
    data = (
        "<activity><sharedurl id='3'>"
        f"<name>Old activity</name><externalurl>{SITE}/mod/page/view.php?id=7</externalurl>"
        f"<display>{display}</display><displayoptions>{options}</displayoptions>"
        "</sharedurl></activity>"
    )

    resp = client.post(f"/sharedurl/courses/{course}/restore", content=data, headers=EDITOR)

    assert resp.status_code == 201
    body = resp.json()
    assert body["display"] == int(expected_display)
    assert body["displayoptions"] == expected_options
