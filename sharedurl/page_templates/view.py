# Values are inserted as-is: callers escape plain text before rendering.

PAGE_HTML = """<!doctype html>
<html lang="{{lang}}">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    {{head_extra}}
    <title>{{title}}</title>
  </head>
  <body id="page-mod-sharedurl-view" class="path-mod path-mod-sharedurl">
    <header id="page-header">
      <h1>{{heading}}</h1>
    </header>
    <div id="region-main" role="main">
{{body}}
    </div>
  </body>
</html>
"""

ACTIVITY_HEADING_HTML = """      <h2>{{name}}</h2>
"""

INTRO_HTML = """      <div class="box generalbox mod_introbox" id="sharedurlintro">{{intro}}</div>
"""

NOTICE_HTML = """      <div class="box generalbox notice" role="alert">
        <p>{{message}}</p>
        <div class="buttons"><a class="btn btn-primary" href="{{continue_url}}">{{continue_text}}</a></div>
      </div>
"""

WORKAROUND_HTML = """      <div class="urlworkaround">{{message}}</div>
"""

LINK_HTML = """<a href="{{url}}"{{extra}}>{{url}}</a>"""

REDIRECT_HEAD_HTML = """<meta http-equiv="refresh" content="{{delay}}; url={{url}}" />"""

REDIRECT_HTML = """      <div class="box generalbox redirectmessage">
        <p>{{edit_link}}<br/>{{message}}</p>
        <div class="continuebutton"><a href="{{url}}">{{continue_text}}</a></div>
      </div>
"""

FRAMESET_HTML = """<!doctype html>
<html lang="{{lang}}">
  <head>
    <meta charset="utf-8" />
    <title>{{title}}</title>
  </head>
  <frameset rows="{{framesize}},*">
    <frame src="{{nav_url}}" title="{{nav_title}}"/>
    <frame src="{{content_url}}" title="{{content_title}}"/>
  </frameset>
</html>
"""
