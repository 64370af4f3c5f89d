"""Group Scheduler - organizer dashboard."""

import logging

import streamlit as st

from config import configure_logging, get_settings
from services.availability_aggregator import AvailabilityAggregator
from services.calendar_service import CalendarService
from services.event_service import EventService
from services.event_store import EventStoreClient, EventStoreError
from services.notification_service import NotificationService
from services.response_formatter import ResponseFormatter
from services.sample_data import build_demo_store
from services.scheduling_engine import SchedulingEngine

# ============================================================================
# CONFIGURATION
# ============================================================================

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

st.set_page_config(
    page_title="Group Scheduler",
    page_icon="🗓️",
    layout="wide"
)

# ============================================================================
# SERVICE INITIALIZATION
# ============================================================================

@st.cache_resource
def get_services(_cache_version="v1.0"):
    """Initialize and cache services."""
    if settings.uses_remote_store:
        try:
            store = EventStoreClient(
                base_url=settings.store_url,
                api_token=settings.store_token,
                default_timezone=settings.timezone,
                timeout=settings.http_timeout
            )
        except ValueError as e:
            st.error(f"Failed to initialize event store client: {e}")
            return None, None
        event_ids = []
    else:
        store = build_demo_store(timezone=settings.timezone)
        event_ids = [event.id for event in store.list_events()]

    notifier = NotificationService(
        gateway_url=settings.notify_gateway_url,
        api_key=settings.notify_api_key,
        from_email=settings.notify_from_email,
        from_phone=settings.notify_from_phone,
        timeout=settings.http_timeout
    )
    event_service = EventService(
        store=store,
        engine=SchedulingEngine(),
        aggregator=AvailabilityAggregator(),
        notifier=notifier,
        calendar_service=CalendarService()
    )
    return event_service, event_ids


event_service, known_event_ids = get_services()
if event_service is None:
    st.stop()

if "finalized" not in st.session_state:
    st.session_state.finalized = {}

# ============================================================================
# SIDEBAR
# ============================================================================

with st.sidebar:
    st.header("📋 Events")
    if known_event_ids:
        event_id = st.selectbox("Event", known_event_ids)
    else:
        event_id = st.text_input("Event ID")
    st.markdown("---")
    st.caption("Store: remote API" if settings.uses_remote_store else "Store: in-memory demo data")

if not event_id:
    st.info("Enter an event ID to see its recommended times.")
    st.stop()

# ============================================================================
# MAIN VIEW
# ============================================================================

try:
    event = event_service.store.get_event(event_id)
    recommendations = event_service.get_recommendations(event_id)
    heatmap = event_service.get_heatmap(event_id)
except EventStoreError as e:
    logger.error("Could not load event %s: %s", event_id, e)
    st.markdown(ResponseFormatter.format_error(
        "Event Unavailable",
        str(e),
        suggestions=["Check the event ID", "Check the event store configuration"]
    ))
    st.stop()

st.title(f"🗓️ {event.name}")
st.caption(
    f"{event.event_type} • {event.availability_start:%b %d} - {event.availability_end:%b %d, %Y} • {event.timezone}"
)

left, right = st.columns([3, 2])

with left:
    text, buttons = ResponseFormatter.format_recommendations(recommendations, event)
    st.markdown(text)

    finalized = st.session_state.finalized.get(event_id)
    if finalized is None:
        for button in buttons:
            if st.button(f"✅ Finalize {button['label']}", key=f"finalize_{event_id}_{button['index']}"):
                chosen = recommendations[button["index"]]
                try:
                    result = event_service.finalize(event_id, chosen.start_time, chosen.end_time)
                except (EventStoreError, ValueError) as e:
                    st.markdown(ResponseFormatter.format_error("Could Not Finalize", str(e)))
                else:
                    st.session_state.finalized[event_id] = result.finalized
                    details = [f"{d.channel} to {d.recipient}: {'sent' if d.success else d.error}"
                               for d in result.deliveries]
                    st.markdown(ResponseFormatter.format_success(
                        "Time Finalized",
                        ResponseFormatter.format_time_range(chosen, event),
                        details=details or None
                    ))
                    st.rerun()
    else:
        st.markdown(ResponseFormatter.format_success(
            "Event Finalized",
            f"{finalized.start:%A, %B %d, %Y %I:%M %p} - {finalized.end:%A, %B %d, %Y %I:%M %p}"
        ))
        filename, ics = event_service.export_calendar(event_id, finalized)
        st.download_button("📅 Add to calendar (.ics)", data=ics, file_name=filename, mime="text/calendar")

with right:
    st.subheader("📊 Availability")
    st.dataframe(ResponseFormatter.format_heatmap_table(heatmap), use_container_width=True, hide_index=True)

    labels = [f"{cell.day:%a %b %d} • {cell.period}" for cell in heatmap]
    if labels:
        selected = st.selectbox("Cell details", range(len(labels)), format_func=lambda i: labels[i])
        st.markdown(ResponseFormatter.format_cell_details(heatmap[selected]))

with st.expander("Raw recommendations (JSON)", expanded=False):
    st.json(ResponseFormatter.recommendations_to_json(recommendations))
