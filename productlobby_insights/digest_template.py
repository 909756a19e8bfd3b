"""HTML rendering for the weekly creator digest email"""
import html
from typing import Optional

from productlobby_insights.models.digest import DigestStats, TopCampaignHighlight

SUBJECT = "Your Weekly Campaign Summary - ProductLobby"

def escape_html(text) -> str:
    """Escape user-sourced text (names, titles, slugs) before it reaches the email body"""
    if text is None:
        return ""
    return html.escape(str(text), quote=True)

def _stat_cell(value: int, label: str, colour: str, last: bool = False) -> str:
    border = "" if last else " border-right: 1px solid #e5e7eb;"
    return f"""
          <td width="25%" style="text-align: center; padding: 12px;{border}">
            <div style="font-size: 28px; font-weight: 700; color: {colour};">{value}</div>
            <div style="font-size: 12px; color: #6b7280;">{label}</div>
          </td>"""

def render_stats(stats: DigestStats) -> str:
    cells = "".join([
        _stat_cell(stats.new_lobbies, "New Lobbies", "#84cc16"),
        _stat_cell(stats.new_comments, "New Comments", "#7c3aed"),
        _stat_cell(stats.total_lobbies, "Total Lobbies", "#06b6d4"),
        _stat_cell(stats.total_campaigns, "Active Campaigns", "#f59e0b", last=True),
    ])
    return f"""
    <div style="background-color: #f9fafb; border: 1px solid #e5e7eb; border-radius: 8px; padding: 24px; margin-bottom: 24px;">
      <h3 style="margin: 0 0 20px 0;">Your Weekly Stats</h3>
      <table cellpadding="0" cellspacing="0" width="100%"><tr>{cells}
      </tr></table>
    </div>"""

def render_top_campaign(top_campaign: Optional[TopCampaignHighlight], app_url: str) -> str:
    if top_campaign is None:
        return ""

    signal = ""
    if top_campaign.signal_score is not None:
        signal = f'<div style="font-size: 13px; margin-bottom: 16px;">Signal Score: <strong>{top_campaign.signal_score:.0f}/100</strong></div>'

    return f"""
    <div style="background: #7c3aed; border-radius: 8px; padding: 24px; margin-bottom: 24px; color: #ffffff;">
      <h3 style="margin: 0 0 16px 0;">Top Performing Campaign</h3>
      <h2 style="margin: 0 0 12px 0;">{escape_html(top_campaign.title)}</h2>
      <p>Lobbies: <strong>{top_campaign.lobby_count}</strong> &middot; Comments: <strong>{top_campaign.comment_count}</strong></p>
      {signal}
      <a href="{escape_html(app_url)}/campaigns/{escape_html(top_campaign.slug)}" style="background-color: #84cc16; color: #1f2937; padding: 10px 16px; border-radius: 6px;">View Campaign</a>
    </div>"""

def creator_digest_html(
    creator_name: str,
    stats: DigestStats,
    top_campaign: Optional[TopCampaignHighlight],
    app_url: str
) -> str:
    """
    Build the digest email body for one creator

    Args:
        creator_name: Display name; only the first word is used in the greeting
        stats: Weekly and lifetime activity numbers
        top_campaign: Best active campaign by lobbies, if any
        app_url: Base URL for links back to the web app

    Returns:
        Complete HTML document
    """
    first_name = creator_name.split(" ")[0] if creator_name else "there"
    base_url = escape_html(app_url)

    return f"""<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Your Weekly Summary - ProductLobby</title>
  </head>
  <body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; color: #1f2937; max-width: 600px; margin: 0 auto; padding: 20px;">
    <h2>Your Weekly Summary</h2>
    <p style="color: #6b7280;">Hi {escape_html(first_name)}, here's what happened with your campaigns this week.</p>
    {render_stats(stats)}
    {render_top_campaign(top_campaign, app_url)}
    <div style="text-align: center; margin-bottom: 24px;">
      <a href="{base_url}/dashboard" style="background-color: #7c3aed; color: #ffffff; padding: 12px 28px; border-radius: 6px;">View Dashboard</a>
    </div>
    <hr style="border: none; border-top: 1px solid #e5e7eb;">
    <p style="font-size: 13px; color: #6b7280;">
      You're receiving this because you have active campaigns on ProductLobby.
      Manage your notification preferences in your <a href="{base_url}/settings/notifications">account settings</a>.
    </p>
  </body>
</html>"""
