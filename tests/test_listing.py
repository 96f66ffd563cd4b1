from openscan.listing import (LinkExtractor, ListingEntry, detect_server_type,
                              extract_entries)

APACHE_TABLE = b"""<!DOCTYPE HTML PUBLIC "-//W3C//DTD HTML 3.2 Final//EN">
<html><head><title>Index of /pub</title></head><body>
<h1>Index of /pub</h1>
<table>
<tr><th valign="top"><img src="/icons/blank.gif" alt="[ICO]"></th><th><a href="?C=N;O=D">Name</a></th><th><a href="?C=M;O=A">Last modified</a></th><th><a href="?C=S;O=A">Size</a></th></tr>
<tr><th colspan="4"><hr></th></tr>
<tr><td valign="top"><img src="/icons/back.gif" alt="[PARENTDIR]"></td><td><a href="/">Parent Directory</a></td><td>&nbsp;</td><td align="right">  - </td></tr>
<tr><td valign="top"><img src="/icons/folder.gif" alt="[DIR]"></td><td><a href="docs/">docs/</a></td><td align="right">2024-01-15 10:00  </td><td align="right">  - </td></tr>
<tr><td valign="top"><img src="/icons/image2.gif" alt="[IMG]"></td><td><a href="cat.jpg">cat.jpg</a></td><td align="right">2024-01-15 10:00  </td><td align="right">1.5K</td></tr>
<tr><td valign="top"><img src="/icons/movie.gif" alt="[VID]"></td><td><a href="clip.mp4">clip.mp4</a></td><td align="right">2024-01-15 10:00  </td><td align="right"> 20M</td></tr>
</table>
<address>Apache/2.4.41 (Ubuntu) Server at example.com Port 80</address>
</body></html>
"""

APACHE_FANCY_CLASSES = b"""<html><body><table>
<tr><td class="indexcolicon"></td><td class="indexcolname"><a href="a.iso">a.iso</a></td>
<td class="indexcollastmod">2024-01-15 10:00</td><td class="indexcolsize">700M</td></tr>
</table></body></html>
"""

APACHE_PRE = b"""<html><body><h1>Index of /x</h1><pre><img src="/icons/blank.gif" alt="Icon "> <a href="?C=N;O=D">Name</a>                    <a href="?C=M;O=A">Last modified</a>      <a href="?C=S;O=A">Size</a>
<hr><img src="/icons/back.gif" alt="[PARENTDIR]"> <a href="/">Parent Directory</a>                             -
<img src="/icons/text.gif" alt="[TXT]"> <a href="readme.txt">readme.txt</a>              2024-01-15 10:00  512
<img src="/icons/compressed.gif" alt="[   ]"> <a href="data.zip">data.zip</a>                2024-01-15 10:00  3.2G
<hr></pre></body></html>
"""

IIS = b"""<html><head><title>example.com - /files/</title></head><body><H1>example.com - /files/</H1><hr>
<pre><A HREF="/">[To Parent Directory]</A><br><br> 1/15/2024 10:00 AM        &lt;dir&gt; <A HREF="/files/old/">old</A><br> 1/15/2024 10:01 AM        12345 <A HREF="/files/report.pdf">report.pdf</A><br></pre><hr></body></html>
"""

PYTHON_HTTP_SERVER = b"""<!DOCTYPE HTML>
<html lang="en"><head><title>Directory listing for /</title></head>
<body><h1>Directory listing for /</h1><hr>
<ul>
<li><a href="music/">music/</a></li>
<li><a href="song.mp3">song.mp3</a></li>
</ul><hr></body></html>
"""


# -----------------------------------------------------------------------------
# Anchors
# -----------------------------------------------------------------------------

def test_all_anchors_are_returned_in_document_order():
    hrefs = [entry.href for entry in extract_entries(APACHE_TABLE)]

    assert hrefs == ["?C=N;O=D", "?C=M;O=A", "?C=S;O=A", "/", "docs/", "cat.jpg", "clip.mp4"]


def test_anchors_without_href_are_ignored():
    body = '<a name="top">x</a><a href="">empty</a><a href="a.txt">a</a>'

    assert extract_entries(body) == [ListingEntry("a.txt", None)]


def test_link_extractor_wraps_extract_entries():
    assert LinkExtractor().extract(PYTHON_HTTP_SERVER) == extract_entries(PYTHON_HTTP_SERVER)


# -----------------------------------------------------------------------------
# Size text
# -----------------------------------------------------------------------------

def sizes(body):
    return {entry.href: entry.size_text for entry in extract_entries(body)}


def test_apache_table_sizes():
    found = sizes(APACHE_TABLE)

    assert found["cat.jpg"] == "1.5K"
    assert found["clip.mp4"] == "20M"
    assert found["docs/"] == "-"


def test_apache_size_column_class_wins():
    assert sizes(APACHE_FANCY_CLASSES)["a.iso"] == "700M"


def test_apache_pre_sizes():
    found = sizes(APACHE_PRE)

    assert found["readme.txt"] == "512"
    assert found["data.zip"] == "3.2G"


def test_iis_sizes_come_before_the_anchor():
    found = sizes(IIS)

    assert found["/files/report.pdf"] == "12345"
    assert found["/files/old/"] is None


def test_list_listings_have_no_sizes():
    found = sizes(PYTHON_HTTP_SERVER)

    assert found == {"music/": None, "song.mp3": None}


# -----------------------------------------------------------------------------
# Server detection
# -----------------------------------------------------------------------------

def test_detect_server_type():
    assert detect_server_type(APACHE_TABLE) == "apache"
    assert detect_server_type(PYTHON_HTTP_SERVER) == "python"
    assert detect_server_type(IIS) == "iis"
    assert detect_server_type(b"<html></html>") == "unknown"


def test_detect_server_type_nginx_autoindex():
    assert detect_server_type("<html><body><h1>Index of /</h1><hr><pre></pre></body></html>") == "nginx"


def test_first_matching_server_wins():
    # Apache pages also carry an "Index of" heading
    assert detect_server_type(b"<h1>Index of /</h1><address>Apache/2.4</address>") == "apache"


def test_link_extractor_logs_server_type(capsys):
    LinkExtractor().extract(PYTHON_HTTP_SERVER)
    assert "Detected server type: python" in capsys.readouterr().out

    LinkExtractor(verbose=False).extract(PYTHON_HTTP_SERVER)
    assert capsys.readouterr().out == ""
