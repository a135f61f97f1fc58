from pydantic import BaseModel, Field

from sharedurl.core.display import DisplayMode


class SharedUrlPayload(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    externalurl: str = Field(..., min_length=1)
    intro: str = ""
    introformat: int = 1
    display: DisplayMode | None = None
    popupwidth: int | None = Field(None, ge=1)
    popupheight: int | None = Field(None, ge=1)
    printintro: bool | None = None
    showdescription: bool = False
    parameters: dict[str, str] = Field(default_factory=dict)


class SharedUrlCreate(SharedUrlPayload):
    course: int = Field(..., ge=1)


class SharedUrlOut(BaseModel):
    id: int
    cmid: int | None = None
    course: int
    name: str
    intro: str | None = None
    introformat: int
    externalurl: str
    display: DisplayMode
    displayoptions: dict
    parameters: dict
    timemodified: int


class CourseModuleInfoOut(BaseModel):
    name: str
    onclick: str | None = None
    content: str | None = None


class SettingsPayload(BaseModel):
    framesize: int | None = Field(None, ge=0)
    displayoptions: list[DisplayMode] | None = None
    printintro: bool | None = None
    display: DisplayMode | None = None
    popupwidth: int | None = Field(None, ge=1)
    popupheight: int | None = Field(None, ge=1)
    redirect_delay: int | None = Field(None, ge=0)
    formats_without_view_page: list[str] | None = None
    wwwroot: str | None = None
    enrol_roleid: int | None = Field(None, ge=0)
    enrol_period: int | None = Field(None, ge=0)
