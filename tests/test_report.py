from datetime import datetime

from reportlab.platypus import Paragraph, Table

from tests.conftest import auth_headers
from taskhub.services.pdf_report import build_html_report_pdf, html_to_flowables, pdf_filename

SAMPLE_HTML = """
<h1>Team report</h1>
<p>Summary with <b>bold</b> &amp; <i>italic</i> text.</p>
<ul><li>First</li><li>Second</li></ul>
<ol><li>Step one</li></ol>
<table>
  <tr><th>Name</th><th>Tasks</th></tr>
  <tr><td>Alice</td><td>3</td></tr>
  <tr><td>Bob</td></tr>
</table>
<script>alert('ignored')</script>
"""


def test_html_to_flowables():
    flowables = html_to_flowables(SAMPLE_HTML)
    paragraphs = [f for f in flowables if isinstance(f, Paragraph)]
    texts = [p.getPlainText() for p in paragraphs]
    assert texts[0] == "Team report"
    assert "Summary with bold & italic text." in texts
    assert [p.bulletText for p in paragraphs if p.bulletText] == ["•", "•", "1."]
    assert not any("alert" in t for t in texts)

    tables = [f for f in flowables if isinstance(f, Table)]
    assert len(tables) == 1
    assert len(tables[0]._cellvalues) == 3
    assert len(tables[0]._cellvalues[2]) == 2


def test_pdf_filename():
    assert pdf_filename("weekly report") == "weekly_report.pdf"
    assert pdf_filename("summary.PDF") == "summary.PDF"
    assert pdf_filename("../..") == "report.pdf"


def test_build_html_report_pdf():
    pdf = build_html_report_pdf(SAMPLE_HTML, "Team report", generated_at=datetime(2024, 6, 1, 9, 30))
    assert pdf.startswith(b"%PDF")


def test_generate_pdf_endpoint(client, staff):
    response = client.post(
        "/report/generate-pdf",
        json={"html": "<p>Hello</p>", "filename": "hello", "title": "Greeting"},
        headers=auth_headers(staff),
    )
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.headers["content-disposition"] == 'attachment; filename="hello.pdf"'
    assert response.content.startswith(b"%PDF")


def test_generate_pdf_requires_fields(client, staff):
    response = client.post("/report/generate-pdf", json={"html": "<p>x</p>"}, headers=auth_headers(staff))
    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields"}


def test_analytics_export(client, staff):
    client.post("/tasks", json={"title": "Numbers"}, headers=auth_headers(staff))

    pdf = client.get("/report/analytics", headers=auth_headers(staff))
    assert pdf.content.startswith(b"%PDF")

    csv_response = client.get("/report/analytics", params={"format": "csv"}, headers=auth_headers(staff))
    assert csv_response.headers["content-type"].startswith("text/csv")
    lines = csv_response.text.splitlines()
    assert lines[0] == "Company KPIs"
    assert "Total tasks,1" in lines
    assert any(line.startswith("Alice Tan,Engineering,1,0,0,underutilized") for line in lines)

    assert client.get("/report/analytics", params={"format": "xml"}, headers=auth_headers(staff)).status_code == 400
