# Client -> server
JOIN_ROOM = "joinRoom"
JOIN_GAME = "joinGame"
REMOVE_PLAYER = "removePlayer"
START_GUESSING = "startGuessing"
SUBMIT_GUESS = "submitGuess"
REVEAL_ANSWER = "revealAnswer"
RESET_GAME = "resetGame"
UPDATE_TITLE = "updateTitle"
UPDATE_PHRASE = "updatePhrase"
CLOSE_ROOM = "closeRoom"

# Server -> client
ROOM_JOINED = "roomJoined"
GAME_UPDATE = "gameUpdate"
ROOM_CLOSED = "roomClosed"
