# taskhub/services/pdf_report.py
"""
Report rendering with ReportLab.

The dashboard posts an HTML fragment of the report it is showing; the fragment
is parsed into ReportLab flowables (headings, paragraphs, list items and
tables) and laid out under a title and a generation timestamp. The analytics
export builds the same kind of document straight from the director
aggregates, or a CSV with the same rows.
"""

import csv
import io
import logging
import re
from datetime import datetime
from html.parser import HTMLParser
from typing import Any, Dict, List, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.pdfgen import canvas as _rl_canvas
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

logger = logging.getLogger(__name__)

HEADING_STYLES = {"h1": "H1", "h2": "H2", "h3": "H3", "h4": "H4", "h5": "H4", "h6": "H4"}
BLOCK_TAGS = {"p", "div", "section", "article", "header", "footer", "blockquote"}
INLINE_TAGS = {"b": "b", "strong": "b", "i": "i", "em": "i", "u": "u"}
SKIPPED_TAGS = {"script", "style", "head", "title"}


def _styles():
    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle(name="H1", fontSize=18, leading=22, spaceAfter=12, textColor=colors.HexColor("#0f172a")))
    styles.add(ParagraphStyle(name="H2", fontSize=14, leading=18, spaceAfter=8, textColor=colors.HexColor("#1f2937")))
    styles.add(ParagraphStyle(name="H3", fontSize=12, leading=16, spaceAfter=6, textColor=colors.HexColor("#1f2937")))
    styles.add(ParagraphStyle(name="H4", fontSize=11, leading=14, spaceAfter=4, textColor=colors.HexColor("#374151")))
    styles.add(ParagraphStyle(name="Muted", fontSize=9, textColor=colors.HexColor("#6b7280")))
    styles.add(ParagraphStyle(name="Body", fontSize=10.5, leading=14, spaceAfter=4))
    styles.add(ParagraphStyle(name="Cell", fontSize=8, leading=10))
    styles.add(ParagraphStyle(name="ListItem", fontSize=10.5, leading=14, leftIndent=14, bulletIndent=4))
    return styles


def _page_number(canv: _rl_canvas.Canvas, doc):
    canv.setFont("Helvetica", 8)
    canv.setFillColor(colors.HexColor("#64748b"))
    canv.drawRightString(doc.pagesize[0] - 36, 18, f"Page {canv.getPageNumber()}")


def _styled_table(rows: List[List[Any]], header: bool = True) -> Table:
    table = Table(rows, repeatRows=1 if header else 0)
    commands = [
        ("GRID", (0, 0), (-1, -1), 0.3, colors.HexColor("#cbd5e1")),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
    ]
    if header:
        commands += [
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#f1f5f9")),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f8fafc")]),
        ]
    table.setStyle(TableStyle(commands))
    return table


class _FragmentParser(HTMLParser):
    """Turns an HTML fragment into a list of ReportLab flowables"""

    def __init__(self, styles):
        super().__init__(convert_charrefs=True)
        self.styles = styles
        self.flowables = []
        self._buffer: List[str] = []
        self._style = "Body"
        self._bullet: Optional[str] = None
        self._inline: List[str] = []
        self._lists: List[Dict[str, Any]] = []
        self._skip = 0
        self._tables: List[Dict[str, Any]] = []

    # Text buffering

    def _open_inline(self) -> str:
        return "".join(f"<{tag}>" for tag in self._inline)

    def _close_inline(self) -> str:
        return "".join(f"</{tag}>" for tag in reversed(self._inline))

    def _take_buffer(self) -> str:
        text = "".join(self._buffer) + self._close_inline()
        self._buffer = [self._open_inline()]
        text = re.sub(r"\s+", " ", text).strip()
        # Drop a trailing or leading line break left over from <br>
        text = re.sub(r"^(<br/>\s*)+|(\s*<br/>)+$", "", text)
        return text

    def _has_text(self) -> bool:
        return bool(re.sub(r"<[^>]+>", "", "".join(self._buffer)).strip())

    def _flush(self):
        if self._tables and self._tables[-1]["cell"] is not None:
            return
        if self._has_text():
            text = self._take_buffer()
            if self._bullet is not None:
                self.flowables.append(Paragraph(text, self.styles["ListItem"], bulletText=self._bullet))
            else:
                self.flowables.append(Paragraph(text, self.styles[self._style]))
        else:
            self._buffer = [self._open_inline()]

    # HTMLParser hooks

    def handle_starttag(self, tag, attrs):
        if tag in SKIPPED_TAGS:
            self._skip += 1
            return
        if self._skip:
            return

        if tag in HEADING_STYLES:
            self._flush()
            self._style = HEADING_STYLES[tag]
        elif tag in BLOCK_TAGS:
            self._flush()
        elif tag in ("ul", "ol"):
            self._flush()
            self._lists.append({"ordered": tag == "ol", "index": 0})
        elif tag == "li":
            self._flush()
            if self._lists:
                current = self._lists[-1]
                current["index"] += 1
                self._bullet = f"{current['index']}." if current["ordered"] else "•"
            else:
                self._bullet = "•"
        elif tag in INLINE_TAGS:
            mapped = INLINE_TAGS[tag]
            self._inline.append(mapped)
            self._buffer.append(f"<{mapped}>")
        elif tag == "br":
            self._buffer.append("<br/>")
        elif tag == "table":
            self._flush()
            self._tables.append({"rows": [], "row": None, "cell": None, "header": False})
        elif tag == "tr" and self._tables:
            self._tables[-1]["row"] = []
        elif tag in ("td", "th") and self._tables:
            table = self._tables[-1]
            if table["row"] is None:
                table["row"] = []
            if tag == "th" and not table["rows"]:
                table["header"] = True
            table["cell"] = []

    def handle_endtag(self, tag):
        if tag in SKIPPED_TAGS:
            self._skip = max(self._skip - 1, 0)
            return
        if self._skip:
            return

        if tag in HEADING_STYLES:
            self._flush()
            self._style = "Body"
        elif tag in BLOCK_TAGS:
            self._flush()
        elif tag == "li":
            self._flush()
            self._bullet = None
        elif tag in ("ul", "ol"):
            self._flush()
            if self._lists:
                self._lists.pop()
        elif tag in INLINE_TAGS:
            mapped = INLINE_TAGS[tag]
            if mapped in self._inline:
                # Close everything opened after it, then reopen the rest
                index = len(self._inline) - 1 - self._inline[::-1].index(mapped)
                trailing = self._inline[index + 1:]
                self._buffer.append("".join(f"</{t}>" for t in reversed(trailing)) + f"</{mapped}>")
                del self._inline[index]
                self._buffer.append("".join(f"<{t}>" for t in trailing))
        elif tag in ("td", "th") and self._tables:
            table = self._tables[-1]
            if table["cell"] is not None:
                text = re.sub(r"\s+", " ", "".join(table["cell"])).strip()
                table["row"].append(Paragraph(text, self.styles["Cell"]))
                table["cell"] = None
        elif tag == "tr" and self._tables:
            table = self._tables[-1]
            if table["row"]:
                table["rows"].append(table["row"])
            table["row"] = None
        elif tag == "table" and self._tables:
            table = self._tables.pop()
            if table["rows"]:
                width = max(len(row) for row in table["rows"])
                rows = [row + [""] * (width - len(row)) for row in table["rows"]]
                self.flowables.append(_styled_table(rows, header=table["header"]))
                self.flowables.append(Spacer(1, 8))

    def handle_data(self, data):
        if self._skip or not data:
            return
        if self._tables and self._tables[-1]["cell"] is not None:
            self._tables[-1]["cell"].append(escape(data))
        elif not self._tables:
            self._buffer.append(escape(data))

    def close(self):
        super().close()
        self._flush()


def html_to_flowables(html: str, styles=None) -> list:
    styles = styles or _styles()
    parser = _FragmentParser(styles)
    parser.feed(html or "")
    parser.close()
    return parser.flowables


def pdf_filename(filename: str) -> str:
    name = re.sub(r"[^A-Za-z0-9._-]+", "_", filename or "").strip("._") or "report"
    if not name.lower().endswith(".pdf"):
        name += ".pdf"
    return name


def _render(story: list, title: str) -> bytes:
    buf = io.BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=A4, title=title,
                            topMargin=28, bottomMargin=36, leftMargin=28, rightMargin=28)
    doc.build(story, onFirstPage=_page_number, onLaterPages=_page_number)
    return buf.getvalue()


def _header(title: str, styles, generated_at: Optional[datetime]) -> list:
    generated_at = generated_at or datetime.now()
    stamp = f"Generated on {generated_at.strftime('%Y-%m-%d')} at {generated_at.strftime('%H:%M:%S')}"
    return [
        Paragraph(escape(title), styles["H1"]),
        Paragraph(stamp, styles["Muted"]),
        Spacer(1, 12),
    ]


def build_html_report_pdf(html: str, title: str, generated_at: Optional[datetime] = None) -> bytes:
    """Render an HTML fragment under a title block; returns PDF bytes"""
    styles = _styles()
    story = _header(title, styles, generated_at)
    body = html_to_flowables(html, styles)
    if not body:
        body = [Paragraph("No content.", styles["Body"])]
    story.extend(body)
    pdf = _render(story, title)
    logger.info(f"Generated PDF report '{title}' ({len(pdf)} bytes)")
    return pdf


# Analytics export


def analytics_sections(kpis: Dict[str, Any], departments: List[Dict[str, Any]],
                       resources: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Rows shared by the PDF and CSV exports"""
    company = kpis.get("companyKPIs", {})
    portfolio = kpis.get("projectPortfolio", {})
    task_metrics = kpis.get("taskMetrics", {})
    return [
        {
            "title": "Company KPIs",
            "header": ["Metric", "Value"],
            "rows": [
                ["Total employees", company.get("totalEmployees", 0)],
                ["Total projects", company.get("totalProjects", 0)],
                ["Total tasks", company.get("totalTasks", 0)],
                ["Tasks created (30 days)", company.get("systemActivity", 0)],
                ["Active projects", portfolio.get("active", 0)],
                ["Completed projects", portfolio.get("completed", 0)],
                ["On-hold projects", portfolio.get("onHold", 0)],
                ["Project completion rate (%)", portfolio.get("completionRate", 0)],
                ["Active tasks", task_metrics.get("active", 0)],
                ["Completed tasks", task_metrics.get("completed", 0)],
                ["Overdue tasks", task_metrics.get("overdue", 0)],
                ["Task completion rate (%)", task_metrics.get("completionRate", 0)],
            ],
        },
        {
            "title": "Department Performance",
            "header": ["Department", "Employees", "Task completion (%)", "Project completion (%)",
                       "Tasks per employee", "Productivity score"],
            "rows": [
                [d["name"], d["employeeCount"], d["taskCompletionRate"], d["projectCompletionRate"],
                 d["tasksPerEmployee"], d["productivityScore"]]
                for d in departments
            ],
        },
        {
            "title": "Workload",
            "header": ["Employee", "Department", "Active tasks", "Overdue", "High priority", "Level"],
            "rows": [
                [e["name"], e["department"], e["activeTasks"], e["overdueTasks"],
                 e["highPriorityTasks"], e["workloadLevel"]]
                for e in resources.get("employeeWorkloads", [])
            ],
        },
    ]


def build_analytics_pdf(kpis, departments, resources, generated_at: Optional[datetime] = None) -> bytes:
    styles = _styles()
    title = "Organisation Analytics"
    story = _header(title, styles, generated_at)
    for section in analytics_sections(kpis, departments, resources):
        story.append(Paragraph(section["title"], styles["H2"]))
        if section["rows"]:
            rows = [section["header"]] + [[str(value) for value in row] for row in section["rows"]]
            story.append(_styled_table(rows))
        else:
            story.append(Paragraph("No data.", styles["Body"]))
        story.append(Spacer(1, 12))
    return _render(story, title)


def build_analytics_csv(kpis, departments, resources) -> str:
    out = io.StringIO()
    writer = csv.writer(out)
    for index, section in enumerate(analytics_sections(kpis, departments, resources)):
        if index:
            writer.writerow([])
        writer.writerow([section["title"]])
        writer.writerow(section["header"])
        writer.writerows(section["rows"])
    return out.getvalue()
