"""
结果导出服务
- 摘要导出为纯文本（附关键词）
- 摘要导出为分页PDF
- 学习数据导出
"""
import time
from datetime import datetime
from io import BytesIO
from typing import Any, Dict, List, Optional

import structlog
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer

from app.schemas.learning import LearningState, SummaryLevel

logger = structlog.get_logger()


def _escape_html(text: str) -> str:
    """转义HTML特殊字符，使ReportLab Paragraph按原文显示"""
    if not text:
        return ""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


class ResultExporter:
    """结果导出器"""

    KEY_TERMS_HEADER = "--- Key Terms ---"

    @staticmethod
    def export_filename(level: SummaryLevel, extension: str, now_ms: Optional[int] = None) -> str:
        """生成导出文件名：summary_<级别>_<毫秒时间戳>.<扩展名>"""
        now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
        return f"summary_{SummaryLevel(level).value}_{now_ms}.{extension}"

    @staticmethod
    def export_summary_text(summary_text: str, key_phrases: List[str]) -> str:
        """
        导出为纯文本

        有关键词时在末尾附加关键词块
        """
        content = summary_text
        if key_phrases:
            content += f"\n\n{ResultExporter.KEY_TERMS_HEADER}\n{', '.join(key_phrases)}"
        return content

    @staticmethod
    def _styles():
        styles = getSampleStyleSheet()
        styles.add(ParagraphStyle(
            name='SummaryTitle',
            parent=styles['Heading1'],
            fontSize=16,
            spaceAfter=12,
            fontName='Helvetica-Bold',
        ))
        styles.add(ParagraphStyle(
            name='SummaryBody',
            parent=styles['Normal'],
            fontSize=12,
            leading=16,
            spaceAfter=6,
        ))
        styles.add(ParagraphStyle(
            name='KeyTermsHeader',
            parent=styles['Heading3'],
            fontSize=14,
            spaceBefore=10,
            spaceAfter=6,
        ))
        styles.add(ParagraphStyle(
            name='Footer',
            parent=styles['Normal'],
            fontSize=10,
            spaceBefore=18,
        ))
        return styles

    @staticmethod
    def export_summary_pdf(
        summary_text: str,
        key_phrases: List[str],
        level: SummaryLevel,
        generated_on: Optional[datetime] = None,
    ) -> BytesIO:
        """
        导出为分页PDF（内容超出一页时自动分页）

        Returns:
            包含PDF内容的BytesIO
        """
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=2*cm,
            leftMargin=2*cm,
            topMargin=2*cm,
            bottomMargin=2*cm,
        )
        styles = ResultExporter._styles()
        level_name = SummaryLevel(level).value.capitalize()

        story = [Paragraph(f"PDF Summary ({level_name} Level)", styles['SummaryTitle'])]
        for paragraph in summary_text.split("\n\n"):
            if paragraph.strip():
                story.append(Paragraph(_escape_html(paragraph.strip()), styles['SummaryBody']))

        if key_phrases:
            story.append(Spacer(1, 0.3*cm))
            story.append(Paragraph("Key Terms:", styles['KeyTermsHeader']))
            story.append(Paragraph(_escape_html(", ".join(key_phrases)), styles['SummaryBody']))

        generated_on = generated_on or datetime.now()
        story.append(Paragraph(f"Generated on {generated_on.strftime('%Y-%m-%d')}", styles['Footer']))

        doc.build(story)
        buffer.seek(0)
        logger.info("摘要PDF导出完成", level=level_name, size=buffer.getbuffer().nbytes)
        return buffer

    @staticmethod
    def export_learning_data(
        current: LearningState,
        history: List[LearningState],
        recent_metrics: List[Dict[str, Any]],
        statistics: Dict[str, Any],
    ) -> Dict[str, Any]:
        """导出学习数据（当前状态、权重历史、最近质量记录、统计）"""
        return {
            "exported_at": datetime.now().isoformat(),
            "current": current.model_dump(mode="json"),
            "history": [state.model_dump(mode="json") for state in history],
            "recent_metrics": recent_metrics,
            "statistics": statistics,
        }
