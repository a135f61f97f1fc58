# sharedurl/lang/en.py
STRINGS = {
    "pluginname": "Shared URL",
    "modulename": "Shared URL",
    "modulenameplural": "Shared URLs",
    "modulename_help": (
        "Shared URL module permits teachers to add a link to an existing course's activity. "
        'It works with the enrol plugin "enrol_shared" which automatically enrol users to that '
        "course if they are not already enrolled."
    ),
    "externalurl": "Activity's URL",
    "invalidstoredurl": "Cannot display this page. The URL must redirect to an existing activity of this moodle.",
    "invalidurl": "Entered URL is invalid",
    "invalidbackup": "The backup file is not a valid shared URL activity backup.",
    "required": "You must supply a value here.",
    "invalidcoursemodule": "Invalid course module ID",
    "nopermissions": "Sorry, but you do not currently have permissions to do that ({$a}).",
    "displaynotallowed": "The selected display option is not enabled on this site.",
    "clicktoopen": "Click {$a} link to open resource.",
    "continue": "Continue",
    "pageshouldredirect": "This page should automatically redirect. If nothing is happening please use the continue link below.",
    "editthisactivity": "Edit settings",
    "editcoursesettings": "Edit course settings",
    "displayselect": "Display",
    "displayselectexplain": "Choose display type, unfortunately not all types are suitable for all URLs.",
    "displayoptions": "Available display options",
    "configdisplayoptions": "Select all options that should be available, existing settings are not modified.",
    "framesize": "Frame height",
    "configframesize": "When a web page or an uploaded file is displayed within a frame, this value is the height (in pixels) of the top frame (which contains the navigation).",
    "printintro": "Display URL description",
    "printintroexplain": "Display URL description below content? Some display types may not display description even if enabled.",
    "popupwidth": "Pop-up width (in pixels)",
    "popupwidthexplain": "Specifies default width of popup windows.",
    "popupheight": "Pop-up height (in pixels)",
    "popupheightexplain": "Specifies default height of popup windows.",
    "sharedurl:addinstance": "Add a new sharedURL resource",
    "sharedurl:view": "View shared URL",
}
