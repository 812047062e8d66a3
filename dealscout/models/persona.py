"""
Persona model - investment/evaluation profile.
Carries the rule set used to score candidates and the bulk-action settings.
"""
import uuid
from datetime import datetime
from typing import Optional, Dict, Any

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON, DateTime

from dealscout.core.timeutils import utc_now


class Persona(SQLModel, table=True):
    """
    Named persona with highlight criteria and bulk-action settings.
    Exactly zero or one persona is active at a time.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)

    # Persona info
    name: str = Field(index=True)
    description: Optional[str] = None

    # Rule set (JSON for flexibility)
    criteria: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    # Example criteria: {
    #   "positive_highlights": ["serial_founder", "prior_exit"],
    #   "negative_highlights": ["career_gap"],
    #   "red_flags": ["no_experience"],
    #   "weights": {"serial_founder": 0.95, "career_gap": -0.2}
    # }

    # Bulk-action settings
    bulk_settings: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    # Example: {"max_candidates_per_run": 20, "confidence_threshold": 0.6,
    #           "default_action": "stage_only", "create_lists_automatically": true}

    # Status
    is_active: bool = Field(default=False, index=True)

    # Creation sequence, assigned by PersonaRepository.create
    position: int = Field(default=0, index=True)

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True), index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))


# Starter catalog appended by PersonaService.initialize_defaults()
DEFAULT_PERSONAS = [
    {
        "name": "Early Stage VC",
        "description": "Pre-seed to Seed investors looking for exceptional founders",
        "criteria": {
            "positive_highlights": [
                "serial_founder", "prior_exit", "yc_alumni", "techstars_alumni",
                "unicorn_experience", "fortune_500_experience", "vc_backed_experience",
                "stanford_alumni", "mit_alumni", "harvard_alumni", "phd_holder",
                "technical_background", "product_leader", "growth_leader",
                "domain_expert", "repeat_ceo", "scaled_team", "raised_funding",
            ],
            "negative_highlights": [
                "no_linkedin", "career_gap", "short_tenure",
                "no_technical_background", "no_startup_experience",
            ],
            "red_flags": ["stealth_only", "no_experience", "junior_level", "consultant_only"],
            "weights": {
                "serial_founder": 0.95, "prior_exit": 0.90, "yc_alumni": 0.85,
                "techstars_alumni": 0.80, "unicorn_experience": 0.85,
                "fortune_500_experience": 0.70, "vc_backed_experience": 0.75,
                "stanford_alumni": 0.65, "mit_alumni": 0.65, "harvard_alumni": 0.60,
                "phd_holder": 0.55, "technical_background": 0.70, "product_leader": 0.65,
                "growth_leader": 0.60, "domain_expert": 0.70, "repeat_ceo": 0.80,
                "scaled_team": 0.75, "raised_funding": 0.70,
                "no_linkedin": -0.30, "career_gap": -0.20, "short_tenure": -0.25,
                "no_technical_background": -0.15, "no_startup_experience": -0.40,
                "stealth_only": -0.50, "no_experience": -0.80, "junior_level": -0.60,
                "consultant_only": -0.35,
            },
        },
        "bulk_settings": {"max_candidates_per_run": 20, "confidence_threshold": 0.6},
    },
    {
        "name": "Growth Stage VC",
        "description": "Series A to C investors looking for proven operators",
        "criteria": {
            "positive_highlights": [
                "scaled_company", "revenue_growth", "team_builder", "market_leader",
                "category_creator", "enterprise_sales", "international_expansion",
                "public_company_experience", "board_experience", "cfo_experience",
                "coo_experience", "vp_engineering", "vp_sales", "vp_marketing",
                "ipo_experience",
            ],
            "negative_highlights": [
                "early_stage_only", "no_scale_experience", "single_company", "small_team_only",
            ],
            "red_flags": ["no_revenue_experience", "no_enterprise_experience", "startup_hopper"],
            "weights": {
                "scaled_company": 0.90, "revenue_growth": 0.85, "team_builder": 0.80,
                "market_leader": 0.85, "category_creator": 0.90, "enterprise_sales": 0.75,
                "international_expansion": 0.70, "public_company_experience": 0.75,
                "board_experience": 0.80, "cfo_experience": 0.70, "coo_experience": 0.75,
                "vp_engineering": 0.70, "vp_sales": 0.70, "vp_marketing": 0.65,
                "ipo_experience": 0.85,
                "early_stage_only": -0.40, "no_scale_experience": -0.50,
                "single_company": -0.20, "small_team_only": -0.30,
                "no_revenue_experience": -0.60, "no_enterprise_experience": -0.35,
                "startup_hopper": -0.45,
            },
        },
        "bulk_settings": {"max_candidates_per_run": 15, "confidence_threshold": 0.7},
    },
    {
        "name": "Private Equity",
        "description": "PE investors looking for operational excellence",
        "criteria": {
            "positive_highlights": [
                "fortune_500_executive", "turnaround_experience", "cost_optimization",
                "margin_improvement", "ma_experience", "integration_experience",
                "pe_backed_company", "ceo_experience", "cfo_experience", "coo_experience",
                "board_director", "industry_veteran", "operational_excellence",
                "ebitda_growth", "debt_management",
            ],
            "negative_highlights": ["startup_only", "no_p_and_l", "no_board_exposure", "tech_only"],
            "red_flags": ["no_corporate_experience", "junior_roles_only", "no_financial_acumen"],
            "weights": {
                "fortune_500_executive": 0.85, "turnaround_experience": 0.90,
                "cost_optimization": 0.80, "margin_improvement": 0.85, "ma_experience": 0.80,
                "integration_experience": 0.75, "pe_backed_company": 0.85,
                "ceo_experience": 0.90, "cfo_experience": 0.85, "coo_experience": 0.80,
                "board_director": 0.75, "industry_veteran": 0.70,
                "operational_excellence": 0.80, "ebitda_growth": 0.85, "debt_management": 0.70,
                "startup_only": -0.50, "no_p_and_l": -0.45, "no_board_exposure": -0.30,
                "tech_only": -0.25, "no_corporate_experience": -0.60,
                "junior_roles_only": -0.70, "no_financial_acumen": -0.55,
            },
        },
        "bulk_settings": {"max_candidates_per_run": 20, "confidence_threshold": 0.5},
    },
    {
        "name": "Investment Banker",
        "description": "IB professionals looking for M&A and IPO candidates",
        "criteria": {
            "positive_highlights": [
                "market_leader", "category_leader", "high_growth", "profitable",
                "recurring_revenue", "strategic_asset", "ipo_ready", "acquisition_target",
                "strong_moat", "network_effects", "platform_play", "roll_up_potential",
                "international_presence", "blue_chip_customers", "regulatory_advantage",
            ],
            "negative_highlights": ["early_stage", "pre_revenue", "single_product", "concentrated_revenue"],
            "red_flags": ["declining_growth", "no_clear_exit", "regulatory_risk", "founder_dependent"],
            "weights": {
                "market_leader": 0.90, "category_leader": 0.85, "high_growth": 0.80,
                "profitable": 0.85, "recurring_revenue": 0.80, "strategic_asset": 0.85,
                "ipo_ready": 0.90, "acquisition_target": 0.80, "strong_moat": 0.85,
                "network_effects": 0.80, "platform_play": 0.75, "roll_up_potential": 0.70,
                "international_presence": 0.70, "blue_chip_customers": 0.75,
                "regulatory_advantage": 0.70,
                "early_stage": -0.50, "pre_revenue": -0.60, "single_product": -0.30,
                "concentrated_revenue": -0.35, "declining_growth": -0.70,
                "no_clear_exit": -0.55, "regulatory_risk": -0.45, "founder_dependent": -0.40,
            },
        },
        "bulk_settings": {"max_candidates_per_run": 20, "confidence_threshold": 0.5},
    },
]
