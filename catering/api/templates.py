"""
Catering Quotes Dashboard — HTML Templates
"""

BASE_CSS = """
:root{--bg:#0f1117;--sf:#1a1d27;--sf2:#242836;--bd:#2e3345;--tx:#e4e6ed;--tx2:#8b90a0;
--ac:#4f8cff;--gn:#34d399;--yl:#fbbf24;--rd:#f87171;--r:10px}
*{margin:0;padding:0;box-sizing:border-box}
body{font-family:'DM Sans',sans-serif;background:var(--bg);color:var(--tx);min-height:100vh}
a{color:var(--ac);text-decoration:none}
.hdr{background:var(--sf);border-bottom:1px solid var(--bd);padding:14px 28px;display:flex;justify-content:space-between;align-items:center}
.hdr h1{font-size:19px;font-weight:700;letter-spacing:-0.5px}.hdr h1 span{color:var(--ac)}
.ctr{max-width:1200px;margin:0 auto;padding:20px}
.card{background:var(--sf);border:1px solid var(--bd);border-radius:var(--r);padding:20px;margin-bottom:16px}
.card-t{font-size:12px;font-weight:600;color:var(--tx2);text-transform:uppercase;letter-spacing:1px;margin-bottom:14px}
.badge{padding:3px 9px;border-radius:16px;font-size:10px;font-weight:600;text-transform:uppercase;letter-spacing:.5px}
.b-pickup{background:rgba(79,140,255,.15);color:var(--ac)}.b-delivery{background:rgba(52,211,153,.15);color:var(--gn)}
table.it{width:100%;border-collapse:collapse;font-size:12px}
table.it th{text-align:left;padding:8px;font-size:10px;color:var(--tx2);text-transform:uppercase;letter-spacing:.5px;border-bottom:1px solid var(--bd)}
table.it td{padding:8px;border-bottom:1px solid var(--bd);vertical-align:middle}
.mono{font-family:'JetBrains Mono',monospace}
.num{text-align:right}
"""

PAGE_QUOTES = """<!DOCTYPE html><html><head><meta charset="utf-8">
<meta name="viewport" content="width=device-width,initial-scale=1">
<title>{{ store_name }} — Quotes</title>
<style>{{ css }}</style></head><body>
<div class="hdr"><h1><span>{{ store_name }}</span> Catering Quotes</h1>
<div class="mono" style="font-size:12px;color:var(--tx2)">{{ quotes|length }} quote(s) · {{ menu_count }} menu item(s)</div></div>
<div class="ctr">
 <div class="card">
  <div class="card-t">Quotes</div>
  {% if quotes %}
  <table class="it">
   <thead><tr><th>Quote #</th><th>Date</th><th>Customer</th><th>Type</th><th>Location</th><th class="num">Total</th><th></th></tr></thead>
   <tbody>
   {% for q in quotes %}
    <tr>
     <td class="mono"><a href="/quotes/{{ q.quote_id }}/print">{{ q.quote_id }}</a></td>
     <td>{{ q.date }}</td>
     <td>{{ q.customer_name }}</td>
     <td><span class="badge b-{{ q.order_type|lower }}">{{ q.order_type }}</span></td>
     <td>{{ q.location_name }}</td>
     <td class="num mono">{{ q.total_fmt }}</td>
     <td><a href="/quotes/{{ q.quote_id }}/pdf">PDF</a></td>
    </tr>
   {% endfor %}
   </tbody>
  </table>
  {% else %}
  <p style="color:var(--tx2)">No quotes yet.</p>
  {% endif %}
 </div>
</div></body></html>"""
