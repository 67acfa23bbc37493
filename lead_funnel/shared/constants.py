from lead_funnel.shared.enums import Geography, Grade, LeadCategory

QUALIFIED_CATEGORIES = frozenset(
    {LeadCategory.BCH, LeadCategory.LUM_L1, LeadCategory.LUM_L2}
)

# Categories routed to the counselling step after academic details.
COUNSELLING_CATEGORIES = QUALIFIED_CATEGORIES | {
    LeadCategory.MASTERS_L1,
    LeadCategory.MASTERS_L2,
}

BCH_GRADES = frozenset({Grade.EIGHT, Grade.NINE, Grade.TEN})
EXTENDED_NURTURE_GRADES = frozenset({Grade.ELEVEN, Grade.TWELVE})
LUMINAIRE_GEOGRAPHIES = frozenset(
    {Geography.UK, Geography.REST_OF_WORLD, Geography.NEED_GUIDANCE}
)

SPAM_GPA_VALUE = 10
SPAM_PERCENTAGE_VALUE = 100

BCH_COUNSELLOR = "Viswanathan"
LUMINAIRE_COUNSELLOR = "Karthik Lakshman"
