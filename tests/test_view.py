import time

import pytest

from conftest import SITE, auth
from sharedurl.core.auth import CAP_ADD_INSTANCE, CAP_COURSE_VIEW, CAP_MANAGE_ACTIVITIES, CAP_UPDATE_COURSE
from sharedurl.core.display import DisplayMode
from sharedurl.models.lms import (
    CONTEXT_MODULE,
    CourseModuleCompletion,
    Enrol,
    LogEvent,
    RoleAssignment,
    UserEnrolment,
)

VIEWER = 100


@pytest.fixture()
def site(lms):
    """Owning course with the viewer enrolled, and a destination course with a page."""
    owner = lms.course(shortname="SRC", fullname="Source course")
    destination = lms.course(shortname="DST", fullname="Destination course")
    page = lms.module(destination, modname="page")
    lms.enrol(owner, VIEWER)
    return {"owner": owner, "destination": destination, "page": page}


def view(client, cmid, user=VIEWER, caps=(), **params):
    query = {"id": cmid, **params}
    return client.get("/view", params=query, headers=auth(user, caps), follow_redirects=False)


def shared_enrolments(db, course_id):
    db.expire_all()
    return db.query(Enrol).filter_by(courseid=course_id, enrol="shared").all()


def test_viewer_is_enrolled_then_redirected(client, db, lms, site):
    lms.setting("enrol_period", 3600)
    url = f"{SITE}/mod/page/view.php?id={site['page']}"
    _, cmid = lms.sharedurl(site["owner"], url)

    before = int(time.time())
    resp = view(client, cmid)
    after = int(time.time())

    assert resp.status_code == 303
    assert resp.headers["location"] == url

    [instance] = shared_enrolments(db, site["destination"])
    assert instance.enrolperiod == 3600
    ue = db.query(UserEnrolment).filter_by(enrolid=instance.id, userid=VIEWER).one()
    assert before + 3600 <= ue.timeend <= after + 3600
    assert before <= ue.timestart <= after
    assert db.query(RoleAssignment).filter_by(userid=VIEWER, roleid=5).count() == 1


def test_redirect_location_is_not_html_escaped(client, lms, site):
    url = f"{SITE}/mod/page/view.php?id={site['page']}&section=2"
    _, cmid = lms.sharedurl(site["owner"], url)

    resp = view(client, cmid)

    assert resp.status_code == 303
    assert resp.headers["location"] == url
    assert "&amp;" not in resp.headers["location"]


def test_view_is_recorded_once(client, db, lms, site):
    _, cmid = lms.sharedurl(site["owner"], f"{SITE}/mod/page/view.php?id={site['page']}")

    view(client, cmid)

    db.expire_all()
    assert db.query(LogEvent).filter_by(userid=VIEWER, contextinstanceid=cmid).count() == 1
    completion = db.query(CourseModuleCompletion).filter_by(coursemoduleid=cmid, userid=VIEWER).one()
    assert completion.viewed == 1


def test_cross_host_url_is_refused_without_enrolment(client, db, lms, site):
    _, cmid = lms.sharedurl(site["owner"], f"https://elsewhere/mod/page/view.php?id={site['page']}")

    resp = view(client, cmid)

    assert resp.status_code == 200
    assert "location" not in resp.headers
    assert "Cannot display this page" in resp.text
    assert f"{SITE}/course/view.php?id={site['owner']}" in resp.text
    assert shared_enrolments(db, site["destination"]) == []
    # the view itself is still recorded
    assert db.query(LogEvent).filter_by(contextinstanceid=cmid).count() == 1


def test_dangling_activity_is_refused(client, db, lms, site):
    _, cmid = lms.sharedurl(site["owner"], f"{SITE}/mod/page/view.php?id=9999")

    resp = view(client, cmid)

    assert resp.status_code == 200
    assert "Cannot display this page" in resp.text


def test_refusal_is_localised(client, lms, site):
    _, cmid = lms.sharedurl(site["owner"], "https://elsewhere/mod/page/view.php?id=1")

    resp = client.get("/view", params={"id": cmid}, headers=auth(VIEWER, lang="fr"))

    assert "Impossible d&#x27;afficher la page" in resp.text


def test_already_enrolled_viewer_gets_no_new_enrolment(client, db, lms, site):
    lms.enrol(site["destination"], VIEWER)
    _, cmid = lms.sharedurl(site["owner"], f"{SITE}/mod/page/view.php?id={site['page']}")

    resp = view(client, cmid)

    assert resp.status_code == 303
    assert shared_enrolments(db, site["destination"]) == []


def test_shared_enrolment_instance_is_created_once(client, db, lms, site):
    lms.enrol(site["owner"], 101)
    _, cmid = lms.sharedurl(site["owner"], f"{SITE}/mod/page/view.php?id={site['page']}")

    view(client, cmid, user=VIEWER)
    view(client, cmid, user=101)
    view(client, cmid, user=VIEWER)

    [instance] = shared_enrolments(db, site["destination"])
    assert db.query(UserEnrolment).filter_by(enrolid=instance.id).count() == 2


def test_file_of_an_activity_resolves(client, db, lms, site):
    ctx = lms.context_id(CONTEXT_MODULE, site["page"])
    url = f"{SITE}/pluginfile.php/{ctx}/mod_page/content/0/picture.png"
    _, cmid = lms.sharedurl(site["owner"], url, display=DisplayMode.EMBED, options={"printintro": 1},
                            intro="<p>Look at this</p>")

    resp = view(client, cmid)

    assert resp.status_code == 200
    assert f'<img title="Shared activity" class="resourceimage" src="{url}"' in resp.text
    assert "Look at this" in resp.text
    assert len(shared_enrolments(db, site["destination"])) == 1


def test_unknown_module_is_not_found(client, site):
    assert view(client, 12345).status_code == 404


def test_other_module_types_are_not_found(client, site):
    assert view(client, site["page"]).status_code == 404


def test_login_is_required(client, lms, site):
    _, cmid = lms.sharedurl(site["owner"], f"{SITE}/mod/page/view.php?id={site['page']}")
    resp = client.get("/view", params={"id": cmid}, follow_redirects=False)
    assert resp.status_code == 401


def test_viewer_must_be_enrolled_in_owning_course(client, db, lms, site):
    _, cmid = lms.sharedurl(site["owner"], f"{SITE}/mod/page/view.php?id={site['page']}")

    assert view(client, cmid, user=555).status_code == 403
    assert view(client, cmid, user=555, caps=(CAP_COURSE_VIEW,)).status_code == 303


def test_forceview_shows_link_instead_of_redirect(client, lms, site):
    url = f"{SITE}/mod/page/view.php?id={site['page']}&x=1"
    _, cmid = lms.sharedurl(site["owner"], url)

    resp = view(client, cmid, forceview=1)

    assert resp.status_code == 200
    assert "Click <a href=" in resp.text
    assert url.replace("&", "&amp;") in resp.text


def test_redirect_flag_redirects_any_display(client, lms, site):
    url = f"{SITE}/mod/page/view.php?id={site['page']}"
    _, cmid = lms.sharedurl(site["owner"], url, display=DisplayMode.EMBED)

    resp = view(client, cmid, redirect=1)

    assert resp.status_code == 303
    assert resp.headers["location"] == url


def test_frame_display(client, lms, site):
    lms.setting("framesize", 200)
    url = f"{SITE}/mod/page/view.php?id={site['page']}"
    _, cmid = lms.sharedurl(site["owner"], url, display=DisplayMode.FRAME, options={"printintro": 1},
                            intro="Read me first")

    resp = view(client, cmid)

    assert resp.status_code == 200
    assert '<frameset rows="200,*">' in resp.text
    assert f'src="{SITE}/view?id={cmid}&amp;frameset=top"' in resp.text
    assert f'src="{url}"' in resp.text

    top = view(client, cmid, frameset="top")
    assert "<frameset" not in top.text
    assert "Read me first" in top.text


def test_popup_display_shows_link_with_window_options(client, lms, site):
    url = f"{SITE}/mod/page/view.php?id={site['page']}"
    _, cmid = lms.sharedurl(site["owner"], url, display=DisplayMode.POPUP,
                            options={"popupwidth": 700, "popupheight": 500})

    resp = view(client, cmid)

    assert resp.status_code == 200
    assert f"window.open('{url}', '', 'width=700,height=500," in resp.text


def test_new_window_display(client, lms, site):
    _, cmid = lms.sharedurl(site["owner"], f"{SITE}/mod/page/view.php?id={site['page']}",
                            display=DisplayMode.NEW)

    resp = view(client, cmid)

    assert "this.target='_blank';" in resp.text


def test_intro_is_not_printed_when_disabled(client, lms, site):
    ctx = lms.context_id(CONTEXT_MODULE, site["page"])
    url = f"{SITE}/pluginfile.php/{ctx}/mod_page/content/0/picture.png"
    _, cmid = lms.sharedurl(site["owner"], url, display=DisplayMode.EMBED, options={"printintro": 0},
                            intro="Hidden description")

    assert "Hidden description" not in view(client, cmid).text


@pytest.mark.parametrize(
    "caps, link",
    [
        ((CAP_MANAGE_ACTIVITIES,), "/course/modedit.php?update="),
        ((CAP_UPDATE_COURSE,), "/course/edit.php?id="),
    ],
)
def test_editors_get_delayed_redirect_in_single_activity_format(client, lms, caps, link):
    owner = lms.course(shortname="ONE", fullname="Single activity", format="singleactivity")
    destination = lms.course()
    page = lms.module(destination)
    lms.enrol(owner, VIEWER)
    url = f"{SITE}/mod/page/view.php?id={page}"
    _, cmid = lms.sharedurl(owner, url)

    resp = view(client, cmid, caps=caps)

    assert resp.status_code == 200
    assert f'<meta http-equiv="refresh" content="10; url={url}" />' in resp.text
    assert link in resp.text


def test_learners_are_redirected_directly_in_single_activity_format(client, lms):
    owner = lms.course(format="singleactivity")
    destination = lms.course()
    page = lms.module(destination)
    lms.enrol(owner, VIEWER)
    _, cmid = lms.sharedurl(owner, f"{SITE}/mod/page/view.php?id={page}")

    assert view(client, cmid).status_code == 303


def test_saved_link_with_section_parameter_redirects(client, lms, site):
    url = f"{SITE}/mod/page/view.php?id={site['page']}&section=2"
    created = client.post(
        "/sharedurl/instances",
        json={"course": site["owner"], "name": "Week 2", "externalurl": url},
        headers=auth(caps=(CAP_ADD_INSTANCE,)),
    )
    assert created.status_code == 201
    assert created.json()["externalurl"] == url

    resp = view(client, created.json()["cmid"])

    assert resp.status_code == 303
    assert resp.headers["location"] == url


def test_requested_id_out_of_range_is_not_found(client, site):
    assert view(client, 10**30).status_code == 404


def test_stored_id_out_of_range_is_refused(client, db, lms, site):
    _, cmid = lms.sharedurl(site["owner"], f"{SITE}/mod/page/view.php?id={10**30}")

    resp = view(client, cmid)

    assert resp.status_code == 200
    assert "Cannot display this page" in resp.text
    assert shared_enrolments(db, site["destination"]) == []


def test_embed_shows_image_and_intro(client, lms, site):
    ctx = lms.context_id(CONTEXT_MODULE, site["page"])
    url = f"{SITE}/pluginfile.php/{ctx}/mod_page/content/0/diagram.svg"
    _, cmid = lms.sharedurl(site["owner"], url, display=DisplayMode.EMBED, options={"printintro": 1},
                            intro="Diagram of the week")

    resp = view(client, cmid)

    assert resp.status_code == 200
    assert '<div class="resourcecontent resourceimg">' in resp.text
    assert f'src="{url}"' in resp.text
    assert 'id="sharedurlintro">Diagram of the week</div>' in resp.text


def test_embed_of_a_page_uses_object_with_a_single_link(client, lms, site):
    url = f"{SITE}/mod/page/view.php?id={site['page']}"
    _, cmid = lms.sharedurl(site["owner"], url, display=DisplayMode.EMBED, options={"printintro": 1},
                            intro="Week notes")

    resp = view(client, cmid, forceview=1)

    assert resp.status_code == 200
    assert f'<object id="resourceobject" data="{url}" type="text/html"' in resp.text
    assert (
        f'<param name="src" value="{url}" />'
        f'Click <a href="{url}">{url}</a> link to open resource.</object>'
    ) in resp.text
    assert "Week notes" in resp.text


def test_auto_download_shows_a_plain_link(client, db, lms, site):
    ctx = lms.context_id(CONTEXT_MODULE, site["page"])
    url = f"{SITE}/pluginfile.php/{ctx}/mod_page/content/0/notes.pdf"
    _, cmid = lms.sharedurl(site["owner"], url)

    resp = view(client, cmid)

    assert resp.status_code == 200
    assert f'<div class="urlworkaround">Click <a href="{url}">{url}</a> link to open resource.</div>' in resp.text
    assert "onclick" not in resp.text
    assert len(shared_enrolments(db, site["destination"])) == 1
