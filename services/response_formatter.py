"""Structured formatting of recommendations and availability for display."""

from typing import List, Dict, Any, Optional

from models.entities import EventDescriptor, HeatmapCell, Recommendation


class ResponseFormatter:
    """Formats scheduler output in a consistent, structured manner."""

    @staticmethod
    def format_time_range(recommendation: Recommendation, event: EventDescriptor) -> str:
        """Human-readable span for a recommendation."""
        start = recommendation.start_time
        end = recommendation.end_time
        if event.is_single_day:
            return f"{start.strftime('%A, %B %d, %Y')} {start.strftime('%I:%M %p')} - {end.strftime('%I:%M %p')}"
        return f"{start.strftime('%A, %B %d, %Y')} - {end.strftime('%A, %B %d, %Y')}"

    @staticmethod
    def format_recommendations(
        recommendations: List[Recommendation],
        event: EventDescriptor
    ) -> tuple[str, List[Dict[str, Any]]]:
        """
        Format recommendations with button information.

        Returns:
            tuple: (formatted_text, button_info_list)
            button_info_list contains dicts with 'label' and 'index' for each recommendation
        """
        if not recommendations:
            return (
                ResponseFormatter.format_info(
                    "Not Enough Data Yet",
                    "No meeting time can be recommended from the responses so far.",
                    items=[
                        "Share the event link with more participants",
                        "Ask respondents to add longer time slots",
                        "Consider a shorter duration or a wider date range"
                    ]
                ),
                []
            )

        lines = [
            "**🎯 Recommended Times**",
            "",
            f"Found **{len(recommendations)}** recommended time(s) for **{event.name}**.",
            ""
        ]

        button_info = []

        for i, recommendation in enumerate(recommendations, 1):
            if i == 1:
                lines.append(f"⭐ **Option {i} (Best Match)** - score {recommendation.score}")
            else:
                lines.append(f"**Option {i}** - score {recommendation.score}")

            lines.append(f"   • When: {ResponseFormatter.format_time_range(recommendation, event)}")
            lines.append(
                f"   • Available ({recommendation.participant_count}): "
                f"{', '.join(recommendation.participant_names)}"
            )
            if recommendation.conflict_participants:
                lines.append(f"   • ⚠️ Conflicts: {', '.join(recommendation.conflict_participants)}")
            lines.append(f"   • {recommendation.reasoning}")
            lines.append("")

            button_info.append({
                "label": recommendation.start_time.strftime('%a %b %d, %I:%M %p'),
                "index": i - 1
            })

        return "\n".join(lines), button_info

    @staticmethod
    def recommendations_to_json(recommendations: List[Recommendation]) -> List[Dict[str, Any]]:
        """Serialize recommendations the way the HTTP layer returns them."""
        return [r.to_dict() for r in recommendations]

    @staticmethod
    def format_heatmap_table(cells: List[HeatmapCell]) -> List[Dict[str, Any]]:
        """One row per day with a 'count/total' column per period."""
        rows: Dict[Any, Dict[str, Any]] = {}
        for cell in cells:
            row = rows.setdefault(cell.day, {"Date": cell.day.strftime('%a %b %d')})
            row[cell.period] = f"{cell.count}/{cell.total_respondents}"
        return list(rows.values())

    @staticmethod
    def format_cell_details(cell: HeatmapCell) -> str:
        """Who is and isn't available for one heatmap cell."""
        lines = [
            f"**{cell.day.strftime('%A, %B %d')} - {cell.period}**",
            f"{cell.count}/{cell.total_respondents} available ({cell.percentage}%)",
            ""
        ]
        if cell.available_names:
            lines.append(f"✅ {', '.join(cell.available_names)}")
        if cell.unavailable_names:
            lines.append(f"❌ {', '.join(cell.unavailable_names)}")
        return "\n".join(lines)

    @staticmethod
    def format_success(title: str, message: str, details: Optional[List[str]] = None) -> str:
        """Format a success message."""
        lines = [
            f"**✅ {title}**",
            "",
            message
        ]

        if details:
            lines.append("")
            lines.append("**Details:**")
            for detail in details:
                lines.append(f"• {detail}")

        return "\n".join(lines)

    @staticmethod
    def format_error(title: str, message: str, suggestions: Optional[List[str]] = None) -> str:
        """Format an error message."""
        lines = [
            f"**❌ {title}**",
            "",
            message
        ]

        if suggestions:
            lines.append("")
            lines.append("**Suggestions:**")
            for suggestion in suggestions:
                lines.append(f"• {suggestion}")

        return "\n".join(lines)

    @staticmethod
    def format_info(title: str, message: str, items: Optional[List[str]] = None) -> str:
        """Format an informational message."""
        lines = [
            f"**ℹ️ {title}**",
            "",
            message
        ]

        if items:
            lines.append("")
            for item in items:
                lines.append(f"• {item}")

        return "\n".join(lines)
