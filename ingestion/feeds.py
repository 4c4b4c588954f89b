"""Registry of RSS endpoints polled by the news sync."""

from __future__ import annotations

from typing import Iterable, Tuple

from ingestion.models.domain import FeedCategory, FeedSource


FeedRegistry = Tuple[FeedSource, ...]


def _feed(url: str, category: FeedCategory, source_name: str) -> FeedSource:
    return FeedSource(url=url, category=category, source_name=source_name)


F, B, T, M, G = (
    FeedCategory.FOOTBALL,
    FeedCategory.BASKETBALL,
    FeedCategory.TENNIS,
    FeedCategory.BASEBALL,
    FeedCategory.GENERAL,
)

DEFAULT_FEEDS: FeedRegistry = (
    # ESPN
    _feed("https://www.espn.com/espn/rss/news", G, "ESPN"),
    _feed("https://www.espn.com/espn/rss/soccer/news", F, "ESPN Soccer"),
    _feed("https://www.espn.com/espn/rss/nba/news", B, "ESPN NBA"),
    _feed("https://www.espn.com/espn/rss/nfl/news", F, "ESPN NFL"),
    _feed("https://www.espn.com/espn/rss/mlb/news", M, "ESPN MLB"),
    _feed("https://www.espn.com/espn/rss/tennis/news", T, "ESPN Tennis"),
    _feed("https://www.espn.com/espn/rss/golf/news", G, "ESPN Golf"),
    _feed("https://www.espn.com/espn/rss/boxing/news", G, "ESPN Boxing"),
    _feed("https://www.espn.com/espn/rss/mma/news", G, "ESPN MMA"),
    _feed("https://www.espn.com/espn/rss/racing/news", G, "ESPN Racing"),
    # BBC Sport
    _feed("https://feeds.bbci.co.uk/sport/rss.xml", G, "BBC Sport"),
    _feed("https://feeds.bbci.co.uk/sport/football/rss.xml", F, "BBC Football"),
    _feed("https://feeds.bbci.co.uk/sport/cricket/rss.xml", G, "BBC Cricket"),
    _feed("https://feeds.bbci.co.uk/sport/rugby-union/rss.xml", G, "BBC Rugby Union"),
    _feed("https://feeds.bbci.co.uk/sport/tennis/rss.xml", T, "BBC Tennis"),
    _feed("https://feeds.bbci.co.uk/sport/golf/rss.xml", G, "BBC Golf"),
    _feed("https://feeds.bbci.co.uk/sport/formula1/rss.xml", G, "BBC F1"),
    # The Guardian
    _feed("https://www.theguardian.com/sport/rss", G, "The Guardian"),
    _feed("https://www.theguardian.com/football/rss", F, "The Guardian Football"),
    _feed("https://www.theguardian.com/sport/premierleague/rss", F, "The Guardian Premier League"),
    _feed("https://www.theguardian.com/sport/championsleague/rss", F, "The Guardian Champions League"),
    _feed("https://www.theguardian.com/sport/tennis/rss", T, "The Guardian Tennis"),
    _feed("https://www.theguardian.com/sport/us-sport/rss", G, "The Guardian US Sports"),
    # Sky Sports
    _feed("https://www.skysports.com/rss/12040", F, "Sky Sports Football"),
    _feed("https://www.skysports.com/rss/11095", F, "Sky Sports Premier League"),
    _feed("https://www.skysports.com/rss/11617", T, "Sky Sports Tennis"),
    _feed("https://www.skysports.com/rss/12433", G, "Sky Sports F1"),
    # US networks and magazines
    _feed("https://www.reuters.com/rssfeed/sportsNews", G, "Reuters Sports"),
    _feed("https://sports.yahoo.com/rss/", G, "Yahoo Sports"),
    _feed("https://sports.yahoo.com/nba/rss.xml", B, "Yahoo NBA"),
    _feed("https://sports.yahoo.com/nfl/rss.xml", F, "Yahoo NFL"),
    _feed("https://sports.yahoo.com/mlb/rss.xml", M, "Yahoo MLB"),
    _feed("https://sports.yahoo.com/soccer/rss.xml", F, "Yahoo Soccer"),
    _feed("https://www.cbssports.com/rss/headlines/", G, "CBS Sports"),
    _feed("https://www.si.com/.rss/si/feeds/all", G, "Sports Illustrated"),
    _feed("https://www.si.com/nfl/.rss/news", F, "SI NFL"),
    _feed("https://www.si.com/nba/.rss/news", B, "SI NBA"),
    _feed("https://www.si.com/mlb/.rss/news", M, "SI MLB"),
    _feed("https://bleacherreport.com/articles/feed", G, "Bleacher Report"),
    _feed("https://www.nbcsports.com/feed", G, "NBC Sports"),
    _feed("https://profootballtalk.nbcsports.com/feed/", F, "Pro Football Talk"),
    _feed("https://www.usatoday.com/sports/rss/", G, "USA Today Sports"),
    _feed("https://rss.nytimes.com/services/xml/rss/nyt/Sports.xml", G, "NY Times Sports"),
    _feed("https://www.sportingnews.com/us/rss", G, "Sporting News"),
    _feed("https://www.theringer.com/rss/index.xml", G, "The Ringer"),
    _feed("https://www.sbnation.com/rss/current", G, "SB Nation"),
    # UK and European press
    _feed("https://talksport.com/feed/", G, "TalkSport"),
    _feed("https://talksport.com/football/feed/", F, "TalkSport Football"),
    _feed("https://www.independent.co.uk/sport/football/rss", F, "The Independent Football"),
    _feed("https://www.dailymail.co.uk/sport/football/index.rss", F, "Daily Mail Football"),
    _feed("https://www.goal.com/feeds/en/news", F, "Goal.com"),
    _feed("https://www.fourfourtwo.com/feed", F, "FourFourTwo"),
    _feed("https://www.football365.com/feed", F, "Football365"),
    _feed("https://www.lequipe.fr/rss/actu_rss_Football.xml", F, "L'Equipe Football"),
    _feed("https://as.com/rss/futbol.xml", F, "AS Football"),
    _feed("https://www.kicker.de/news/fussball/rss.xml", F, "Kicker"),
    _feed("https://www.eurosport.com/rss.xml", G, "Eurosport"),
    # Rest of world
    _feed("https://www.sportsnet.ca/feed/", G, "Sportsnet"),
    _feed("https://www.smh.com.au/rss/sport.xml", G, "SMH Sports"),
    _feed("https://www.espn.com.au/rss/news", G, "ESPN Australia"),
    _feed("https://www.straitstimes.com/news/sport/rss.xml", G, "Straits Times Sports"),
    # Leagues and governing bodies
    _feed("https://www.nba.com/news/rss.xml", B, "NBA Official"),
    _feed("https://www.mlb.com/feeds/news/rss.xml", M, "MLB Official"),
    _feed("https://www.atptour.com/en/media/rss-feed/xml-feed", T, "ATP Tour"),
    _feed("https://www.wtatennis.com/rss", T, "WTA"),
    _feed("https://olympics.com/en/news/rss", G, "Olympics"),
    # Specialist outlets
    _feed("https://hoopshype.com/feed/", B, "HoopsHype"),
    _feed("https://www.basketballinsiders.com/feed/", B, "Basketball Insiders"),
    _feed("https://www.celticsblog.com/rss/current", B, "Celtics Blog"),
    _feed("https://www.tennis.com/rss.aspx", T, "Tennis.com"),
    _feed("https://www.perfect-tennis.com/feed/", T, "Perfect Tennis"),
    _feed("https://www.baseballamerica.com/feed/", M, "Baseball America"),
    _feed("https://blogs.fangraphs.com/feed/", M, "FanGraphs"),
    _feed("https://www.thisisanfield.com/feed", F, "This Is Anfield"),
    _feed("https://www.managingmadrid.com/rss/current", F, "Managing Madrid"),
    _feed("https://www.barcablaugranes.com/rss/current", F, "Barca Blaugranes"),
    _feed("https://www.cyclingnews.com/feed/", G, "Cycling News"),
    _feed("https://www.espncricinfo.com/rss/content/story/feeds/0.xml", G, "ESPNCricInfo"),
    _feed("https://dotesports.com/feed", G, "Dot Esports"),
)


def feeds_by_category(registry: Iterable[FeedSource], category: FeedCategory) -> FeedRegistry:
    return tuple(feed for feed in registry if feed.category == category)
