import pytest

from cyber_fitness.bank import DEFAULT_BANK_PATH, load_bank, parse_bank

SAMPLE_BANK = {
    "version": 1,
    "domains": [
        {
            "id": "accounts",
            "title": "Accounts",
            "levels": [
                {
                    "level": 1,
                    "questions": [
                        {
                            "id": "password_manager", "type": "YN", "weight": 10,
                            "category": "password_security", "quick_win": True,
                            "text": "Do you use a password manager?",
                            "options": [
                                {"id": "yes", "facts": {"password_manager": "yes"}},
                                {"id": "no", "facts": {"password_manager": "no"}},
                            ],
                        },
                        {
                            "id": "software_updates", "type": "ACTION", "weight": 9,
                            "category": "system_security",
                            "text": "How do you handle software updates?",
                            "options": [
                                {"id": "automatic", "points": 9, "facts": {"software_updates": "automatic"}},
                                {"id": "manual", "points": 4, "facts": {"software_updates": "manual"}},
                            ],
                        },
                        {
                            "id": "two_factor_auth", "type": "ACTION", "weight": 8,
                            "text": "Do you use 2FA?",
                            "options": [
                                {"id": "yes", "points": 8, "facts": {"two_factor": "yes"}},
                                {"id": "partial", "points": 4, "facts": {"two_factor": "partial"}},
                                {"id": "no", "points": 0, "facts": {"two_factor": "no"}},
                            ],
                        },
                        {
                            "id": "encryption_confidence", "type": "SCALE", "weight": 5,
                            "text": "How sure are you that your disk is encrypted?",
                        },
                    ],
                },
                {
                    "level": 2,
                    "questions": [
                        {
                            "id": "two_factor_app_type", "type": "YN", "weight": 4,
                            "text": "Do you use an authenticator app?",
                            "conditions": {"include": {"two_factor": ["yes", "partial"]}},
                        },
                        {
                            "id": "two_factor_setup_email", "type": "YN", "weight": 4,
                            "text": "Will you enable 2FA on email?",
                            "conditions": {"include": {"two_factor": ["partial", "no"]}},
                        },
                        {
                            "id": "public_wifi_vpn", "type": "YN", "weight": 3,
                            "text": "Do you use a VPN on public WiFi?",
                            "conditions": {"exclude": {"device_type": "desktop", "works_remotely": "no"}},
                        },
                    ],
                },
            ],
        },
    ],
    "suites": [
        {
            "id": "advanced_security",
            "title": "Advanced Security",
            "gates": {"password_manager": "yes", "software_updates": "automatic"},
            "questions": [
                {
                    "id": "advanced_2fa", "type": "ACTION", "weight": 6,
                    "text": "Do you use hardware security keys?",
                    "options": [{"id": "yes", "points": 6}, {"id": "no", "points": 0}],
                },
            ],
        },
    ],
}


@pytest.fixture
def bank():
    """A small question bank built in memory."""
    return parse_bank(SAMPLE_BANK)


@pytest.fixture
def default_bank():
    """The question bank shipped with the package."""
    return load_bank(DEFAULT_BANK_PATH)


@pytest.fixture
def tmp_state(tmp_path):
    """Provide a temporary snapshot file path for tests."""
    return str(tmp_path / "state.json")
