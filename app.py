"""Web interface using Streamlit."""

import streamlit as st

from cardrec import (
    CardRecError,
    ChatMessage,
    ExternalServiceError,
    Recommendation,
    RecommendationPipeline,
)
from cardrec.config import config

SUGGESTED_QUESTIONS = [
    "Best Card for Travel",
    "I'm 40 and love to travel and make $100k a year",
    "Best card for groceries and gas",
    "Best no-annual-fee starter card",
]

DEFAULT_ASSISTANT_TEXT = "Here are some recommendations for you:"

TROUBLESHOOTING_HINTS = (
    "Please check:\n"
    "- Your OpenAI API key is set correctly in .env\n"
    "- The card data sheet is public and the embeddings store was generated\n"
    "- The server logs for more details"
)

config.setup_logging()
logger = config.get_logger(__name__)


class SessionState:
    """Centralized session state management."""

    @staticmethod
    def initialize() -> None:
        """Initialize all session state variables."""
        defaults = {
            "messages": [],
            "pending_question": "",
        }

        for key, default_value in defaults.items():
            if key not in st.session_state:
                st.session_state[key] = default_value

    @staticmethod
    def clear_conversation() -> None:
        st.session_state.messages = []
        st.session_state.pending_question = ""


@st.cache_resource(show_spinner=False)
def get_pipeline() -> RecommendationPipeline:
    """Build the pipeline once per process; the store is shared read-only."""
    return RecommendationPipeline()


def validate_configuration() -> bool:
    """Validate application configuration and show user feedback.

    Returns:
        bool: True if configuration is valid, False otherwise.
    """
    try:
        config.validate()
    except ValueError as e:
        st.error(f"Configuration Error: {e}")
        return False
    else:
        return True


def format_error_message(error: Exception) -> str:
    """Build the synthetic assistant message shown when a request fails.

    Returns:
        str: Error text followed by troubleshooting hints.
    """
    message = str(error)
    if isinstance(error, ExternalServiceError) and error.details:
        message = f"{error.message}\n\nDetails: {error.details}"
    return f"❌ Error: {message}\n\n{TROUBLESHOOTING_HINTS}"


def answer(question: str) -> ChatMessage:
    """Run one question through the pipeline and build the assistant turn.

    Returns:
        ChatMessage: Assistant message with recommendations or an error.
    """
    try:
        pipeline = get_pipeline()
        response = pipeline.recommend(question)
    except (CardRecError, ValueError) as e:
        logger.exception("Question processing failed")
        return ChatMessage(role="assistant", content=format_error_message(e))

    return ChatMessage(
        role="assistant",
        content=response.raw_model_answer or DEFAULT_ASSISTANT_TEXT,
        recommendations=response.recommendations,
    )


def render_recommendation(rec: Recommendation) -> None:
    with st.container(border=True):
        st.markdown(f"**{rec.credit_card_name}**")
        st.write(rec.reason)
        st.link_button("Apply Now →", rec.apply_url)


def render_sidebar() -> None:
    """Render the sidebar with configuration and system status."""
    with st.sidebar:
        st.header("System Status")
        config_status = "Valid" if validate_configuration() else "Invalid"
        st.write(f"**Configuration:** {config_status}")
        st.write(f"**Chat Model:** {config.CHAT_MODEL}")
        st.write(f"**Candidates per question:** {config.TOP_N_CARDS}")

        st.divider()
        if st.button("Clear conversation", use_container_width=True):
            SessionState.clear_conversation()
            st.rerun()


def render_suggested_questions() -> None:
    st.caption("Try asking:")
    columns = st.columns(len(SUGGESTED_QUESTIONS))
    for column, question in zip(columns, SUGGESTED_QUESTIONS, strict=True):
        if column.button(question, use_container_width=True):
            st.session_state.pending_question = question


def render_chat_history() -> None:
    """Render all turns held in the session."""
    if not st.session_state.messages:
        st.info(
            "Start a conversation to get credit card recommendations! "
            "Try one of the suggested questions above."
        )
        return

    for message in st.session_state.messages:
        with st.chat_message(message.role):
            st.markdown(message.content)
            if message.recommendations:
                st.markdown("**Recommended Cards:**")
                for rec in message.recommendations:
                    render_recommendation(rec)


def render_recommendations_summary() -> None:
    """Render every recommendation made in this session."""
    recommendations = [
        rec
        for message in st.session_state.messages
        for rec in message.recommendations
    ]
    if not recommendations:
        return

    st.markdown("---")
    st.header("Recommended Credit Cards")
    columns = st.columns(2)
    for index, rec in enumerate(recommendations):
        with columns[index % 2]:
            render_recommendation(rec)


def handle_input() -> None:
    typed = st.chat_input("Ask about credit cards...")
    question = (typed or st.session_state.pending_question or "").strip()
    st.session_state.pending_question = ""
    if not question:
        return

    st.session_state.messages.append(ChatMessage(role="user", content=question))
    with st.spinner("Thinking..."):
        st.session_state.messages.append(answer(question))
    st.rerun()


def main() -> None:
    """Main entry point for the Streamlit web application."""
    st.set_page_config(
        page_title="Credit Card Recommendation Chatbot",
        layout="centered",
    )

    SessionState.initialize()

    st.title("Credit Card Recommendation Chatbot")
    st.markdown("Get personalized credit card recommendations powered by AI")

    render_sidebar()
    render_suggested_questions()
    render_chat_history()
    render_recommendations_summary()
    handle_input()


if __name__ == "__main__":
    main()
