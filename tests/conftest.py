"""Shared test fixtures for admitwriter."""

import logging

import pytest
from unittest.mock import AsyncMock, MagicMock

from admitwriter.config.models import AdmitWriterConfig
from admitwriter.llm.base import LLMProvider
from admitwriter.llm.models import LLMConfig, LLMResponse, TokenUsage
from admitwriter.profile.models import CandidateProfile
from admitwriter.writer.models import GenerationRequest, Tone
from admitwriter.writer.session import WriterSession


@pytest.fixture
def profile_data():
    """Raw profile snapshot in the camelCase shape the profile store keeps."""
    return {
        "personalInfo": {
            "fullName": "Priya Sharma",
            "email": "priya@example.com",
            "city": "Pune",
            "state": "Maharashtra",
            "gender": "female",
        },
        "academics": [
            {"level": "10th", "institution": "", "percentage_cgpa": "92"},
            {
                "level": "graduation",
                "institution": "COEP",
                "board_university": "SPPU",
                "stream_branch": "B.Tech Mechanical",
                "percentage_cgpa": "8.4 CGPA",
                "year_of_completion": "2019",
            },
        ],
        "entranceScores": [
            {
                "examName": "CAT",
                "overallPercentile": "99.1",
                "year": "2024",
                "sectionalScores": [
                    {"section": "VARC", "percentile": "98.2"},
                    {"section": "QA", "percentile": ""},
                ],
            },
            {"examName": "GMAT", "overallPercentile": ""},
        ],
        "workExperience": [
            {
                "companyName": "Tata Motors",
                "designation": "Product Engineer",
                "industry": "Automotive",
                "startDate": "2019-07",
                "isCurrentRole": True,
                "responsibilities": "Owned the EV battery-pack test rig",
                "achievements": "Cut validation time by 30%",
            },
            {"companyName": "   ", "designation": "Intern"},
        ],
        "activities": [
            {"name": "Robotics Club", "level": "national", "description": "Led a 12-member team"},
            {"name": ""},
        ],
        "achievements": [{"title": "Best Paper, SAE 2021", "year": "2021"}, {"title": ""}],
        "certifications": [{"name": "Six Sigma Green Belt", "issuingOrganization": "ASQ"}],
        "careerGoals": {
            "shortTermGoals": "Product strategy in EV mobility",
            "longTermGoals": "Lead an EV startup",
            "whyMba": "Move from engineering to strategy",
            "targetSchools": ["ISB", ""],
            "preferredSpecialization": ["Strategy"],
        },
        "additionalInfo": {"hobbies": "Trekking", "languages": ["English", "Marathi", " "]},
    }


@pytest.fixture
def sample_profile(profile_data):
    return CandidateProfile.model_validate(profile_data)


@pytest.fixture
def sample_request():
    return GenerationRequest(
        target_identity="ISB",
        length_target=1000,
        tone=Tone.conversational,
        freeform_highlights="Built a battery test rig that cut validation time by 30%.",
    )


@pytest.fixture
def session():
    return WriterSession()


@pytest.fixture
def mock_llm_provider():
    provider = MagicMock(spec=LLMProvider)
    provider.config = LLMConfig(provider="openai", model="test-model")
    provider.generate = AsyncMock(
        return_value=LLMResponse(
            content="  Generated section text.  ",
            usage=TokenUsage(input_tokens=100, output_tokens=250),
            model="test-model",
        )
    )

    async def _fake_stream(*args, **kwargs):
        for chunk in ["Generated ", "section ", "text."]:
            yield chunk

    provider.generate_stream = MagicMock(side_effect=_fake_stream)
    return provider


@pytest.fixture
def sample_config():
    return AdmitWriterConfig()


@pytest.fixture(autouse=True)
def _reset_admitwriter_logger():
    """Undo handlers installed by configure_logging so caplog keeps working."""
    yield
    logger = logging.getLogger("admitwriter")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
