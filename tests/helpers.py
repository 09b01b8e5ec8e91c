"""Wire-frame builders shared by the test modules."""

import json


def frame(message_type, data=None):
    return json.dumps({"type": message_type, "data": data if data is not None else {}})


def room_player(pid, name, seat, chips=1000):
    return {"id": pid, "name": name, "seatPosition": seat, "chips": chips}


def room_dict(code="ABCD", status="waiting", players=None, host_id="p1",
              min_players=2, max_players=6):
    if players is None:
        players = [room_player("p1", "Alice", 0)]
    return {
        "code": code,
        "status": status,
        "players": players,
        "minPlayers": min_players,
        "maxPlayers": max_players,
        "hostId": host_id,
    }


def game_player(pid, name, seat, chips=1000, bet=0, folded=False, all_in=False):
    return {
        "id": pid,
        "name": name,
        "seatPosition": seat,
        "chips": chips,
        "currentBet": bet,
        "isFolded": folded,
        "isAllIn": all_in,
    }


def card(display, suit, rank=None):
    return {"display": display, "suit": suit, "rank": rank or display[:-1]}


def game_dict(players=None, current="p1", pot=30, current_bet=20, big_blind=20,
              min_raise=20, dealer=0, cards=None, hand_complete=False, winners=None,
              **extra):
    if players is None:
        players = [
            game_player("p1", "Alice", 0, chips=990, bet=10),
            game_player("p2", "Bob", 1, chips=980, bet=20),
        ]
    state = {
        "pot": pot,
        "currentBet": current_bet,
        "bigBlind": big_blind,
        "minRaise": min_raise,
        "dealerIndex": dealer,
        "currentPlayerId": current,
        "communityCards": cards or [],
        "players": players,
        "handComplete": hand_complete,
        "winners": winners,
    }
    state.update(extra)
    return state


def welcome_frame(client_id="c-1"):
    return frame("welcome", {"clientId": client_id})


def joined_frame(player_id="p1", room=None, room_id="ABCD"):
    return frame("joinedRoom", {
        "roomId": room_id,
        "playerId": player_id,
        "room": room if room is not None else room_dict(),
    })


def game_frame(state=None, player_id=None, action=None):
    data = {"gameState": state if state is not None else game_dict()}
    if player_id is not None:
        data["playerId"] = player_id
    if action is not None:
        data["action"] = action
    return frame("gameUpdate", data)
