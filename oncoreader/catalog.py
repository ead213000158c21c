"""
Static feed catalog.

The journals are listed in display order; ingestion preserves this order.
"""

from typing import List

from oncoreader.models import FeedSource

FEEDS: List[FeedSource] = [
    {
        "name": "JCO (Clinical Oncology)",
        "url": "https://ascopubs.org/action/showFeed?type=etoc&feed=rss&jc=jco",
    },
    {
        "name": "Annals of Oncology",
        "url": "https://www.annalsofoncology.org/current.rss",
    },
    {
        "name": "The Lancet Oncology",
        "url": "https://www.thelancet.com/rssfeed/lanonc_current.xml",
    },
    {
        "name": "NEJM Oncology",
        "url": "https://onesearch-rss.nejm.org/api/specialty/rss"
        "?context=nejm&specialty=hematology-oncology",
    },
    {"name": "JAMA Oncology", "url": "https://jamanetwork.com/rss/site_159/174.xml"},
    {
        "name": "JAMA Otolaryngology",
        "url": "https://jamanetwork.com/rss/site_18/74.xml",
    },
    {
        "name": "JCO Oncology Practice",
        "url": "https://ascopubs.org/action/showFeed?type=etoc&feed=rss&jc=op",
    },
    {
        "name": "JCO Precision Oncology",
        "url": "https://ascopubs.org/action/showFeed?type=etoc&feed=rss&jc=po",
    },
    {
        "name": "JCO Oncology Advances",
        "url": "https://ascopubs.org/action/showFeed?type=etoc&feed=rss&jc=oa",
    },
    {
        "name": "ASCO Educational Book",
        "url": "https://ascopubs.org/action/showFeed?type=etoc&feed=rss&jc=edbk",
    },
    {"name": "Nature Reviews Clin Onc", "url": "https://www.nature.com/nrclinonc.rss"},
    {"name": "npj Breast Cancer", "url": "https://www.nature.com/npjbcancer.rss"},
    {
        "name": "npj Precision Oncology",
        "url": "https://www.nature.com/npjprecisiononcology.rss",
    },
    {
        "name": "Clinical Cancer Research",
        "url": "https://aacrjournals.org/rss/site_1000013/1000009.xml",
    },
    {
        "name": "Cancer Discovery",
        "url": "https://aacrjournals.org/rss/site_1000003/1000004.xml",
    },
    {
        "name": "Cancer Research",
        "url": "https://aacrjournals.org/rss/site_1000011/1000008.xml",
    },
]


def catalog_urls() -> List[str]:
    """Returns every catalog feed URL, in catalog order."""
    return [feed["url"] for feed in FEEDS]
